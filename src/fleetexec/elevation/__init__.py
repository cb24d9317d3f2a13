"""
Privilege elevation for the fleetexec package.

One strategy per host platform is selected by get_elevator(); sudo() is the
high-level entry point used by commands that need root/administrator rights.
"""

from .base import AbstractElevator
from .posix import SudoElevator
from .privileges import get_elevator, sudo
from .windows import WindowsRunAsElevator

__all__ = [
    "AbstractElevator",
    "SudoElevator",
    "WindowsRunAsElevator",
    "get_elevator",
    "sudo",
]
