"""
Sorting guided by a manually curated reference list.
"""

import functools
import operator
from typing import Any, Callable, Sequence, TypeVar

T = TypeVar('T')
U = TypeVar('U')


def get_manual_sort_compare_function(
    manually_sorted: Sequence[U],
    equality_func: Callable[[T, U], bool] = operator.eq,
) -> Callable[[T, T], int]:
    """
    Return a compare(a, b) function that follows ``manually_sorted``.

    - If both a and b are found in the reference list, their reference
      order is followed.
    - If neither is found, a and b are compared with < and >.
    - If only one is found, it sorts before the other.

    Args:
        manually_sorted: Pre-sorted reference list guiding the order
        equality_func: equality_func(item, reference_item) decides whether a
            sorted item matches a reference entry. For example
            ``lambda a, x: a.startswith(x)`` lets the reference list hold
            prefixes.

    Returns:
        Comparator suitable for functools.cmp_to_key
    """
    def index_of(item: T) -> int:
        for index, reference in enumerate(manually_sorted):
            if equality_func(item, reference):
                return index
        return -1

    def compare(a: T, b: T) -> int:
        index_a = index_of(a)
        index_b = index_of(b)
        if index_a >= 0 and index_b >= 0:
            return index_a - index_b
        if index_a < 0 and index_b < 0:
            return (a > b) - (a < b)
        return 1 if index_a < 0 else -1

    return compare


def manual_sort_key(
    manually_sorted: Sequence[U],
    equality_func: Callable[[T, U], bool] = operator.eq,
) -> Callable[[T], Any]:
    """Key function form of get_manual_sort_compare_function for sorted()."""
    return functools.cmp_to_key(
        get_manual_sort_compare_function(manually_sorted, equality_func)
    )
