"""
Proxy configuration lookup.

A globally installed proxy tunnel publishes its settings with
set_tunnel_config(); this module only reads them. Without a tunnel the
HTTPS_PROXY and HTTP_PROXY environment variables are consulted, in that order.
"""

import logging
from typing import Optional
from urllib.parse import urlsplit

from ..models import ExecutionContext, ProxyConfig, TunnelConfig

logger = logging.getLogger(__name__)

# Ports implied by the scheme; an explicit default port reads as no port.
_DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443, "ftp": 21}

# Process-wide tunnel state; None when no tunnel is active.
_TUNNEL_CONFIG: Optional[TunnelConfig] = None


def set_tunnel_config(config: TunnelConfig) -> None:
    """Publish the active proxy tunnel settings for the whole process."""
    global _TUNNEL_CONFIG
    _TUNNEL_CONFIG = config
    logger.debug(f"Proxy tunnel configured: {config.host}:{config.port}")


def clear_tunnel_config() -> None:
    global _TUNNEL_CONFIG
    _TUNNEL_CONFIG = None


def get_tunnel_config() -> Optional[TunnelConfig]:
    return _TUNNEL_CONFIG


def _from_tunnel(tunnel: TunnelConfig) -> ProxyConfig:
    username = None
    password = None
    proxy_auth = tunnel.proxy_auth
    if proxy_auth:
        i = proxy_auth.rfind(":")
        if i > 0:
            username = proxy_auth[:i]
            password = proxy_auth[i + 1:]
    return ProxyConfig(
        host=tunnel.host,
        port=str(tunnel.port),
        username=username,
        password=password,
        proxy_auth=proxy_auth,
    )


def _from_url(proxy_url: str) -> Optional[ProxyConfig]:
    try:
        parts = urlsplit(proxy_url)
        port = parts.port
    except ValueError as e:
        logger.debug(f"Ignoring malformed proxy URL '{proxy_url}': {e}")
        return None
    if not parts.scheme or not parts.hostname:
        logger.debug(f"Ignoring malformed proxy URL '{proxy_url}'")
        return None

    username = parts.username or None
    password = parts.password or None
    return ProxyConfig(
        host=parts.hostname,
        port="" if port is None or port == _DEFAULT_PORTS.get(parts.scheme) else str(port),
        username=username,
        password=password,
        proxy_auth=f"{username}:{password}" if username and password else None,
    )


def get_proxy_config(context: Optional[ExecutionContext] = None) -> Optional[ProxyConfig]:
    """
    Return the active proxy configuration, if any.

    A tunnel configuration takes precedence over the environment entirely.
    A proxy URL that cannot be parsed yields None rather than an error.

    Args:
        context: Execution context carrying the tunnel state and environment

    Returns:
        ProxyConfig, or None when no proxy is configured
    """
    context = context or ExecutionContext.from_environment()
    if context.tunnel_config is not None:
        return _from_tunnel(context.tunnel_config)

    proxy_url = context.getenv("HTTPS_PROXY") or context.getenv("HTTP_PROXY")
    if proxy_url:
        return _from_url(proxy_url)
    return None
