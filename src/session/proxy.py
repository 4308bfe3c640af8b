"""
Proxy settings for the browser identity.

Returns the dict Playwright expects for its `proxy` launch option. Provider
presets build sticky-session usernames so one session keeps one exit IP.
"""

import uuid
from typing import Dict, Optional
from urllib.parse import urlparse

from src.core.config import Config
from src.core.logging import get_logger

logger = get_logger(__name__)

PROVIDER_ENDPOINTS = {
    "brightdata": ("brd.superproxy.io", "22225"),
    "oxylabs": ("pr.oxylabs.io", "7777"),
}


def new_session_id() -> str:
    return uuid.uuid4().hex[:12]


def _provider_username(provider: str, username: str, country: str, session_id: Optional[str]) -> str:
    if provider == "brightdata":
        parts = [username]
        if country:
            parts.append(f"country-{country.lower()}")
        if session_id:
            parts.append(f"session-{session_id}")
        return "-".join(parts)

    # oxylabs
    parts = [f"customer-{username}"]
    if country:
        parts.append(f"cc-{country.upper()}")
    if session_id:
        parts.append(f"sessid-{session_id}")
    return "-".join(parts)


def build_proxy_settings(config: Config, session_id: Optional[str] = None) -> Optional[Dict[str, str]]:
    """
    Build Playwright proxy settings from configuration.

    Args:
        config: Application configuration
        session_id: Sticky session id (used when PROXY_STICKY_SESSION is on)

    Returns:
        {"server", "username", "password"} or None when proxying is off

    Raises:
        ValueError: If the proxy is enabled but incompletely configured
    """
    if not config.proxy_enabled:
        return None

    provider = config.proxy_type
    sticky = session_id if config.proxy_sticky_session else None

    if provider == "custom":
        if not config.custom_proxy_url:
            raise ValueError("CUSTOM_PROXY_URL is required when PROXY_TYPE=custom")
        parsed = urlparse(config.custom_proxy_url)
        if not parsed.hostname:
            raise ValueError(f"CUSTOM_PROXY_URL is not a valid URL: {config.custom_proxy_url}")
        server = f"{parsed.scheme or 'http'}://{parsed.hostname}"
        if parsed.port:
            server += f":{parsed.port}"
        settings = {"server": server}
        if parsed.username:
            settings["username"] = parsed.username
        if parsed.password:
            settings["password"] = parsed.password
        logger.info(f"[Session] Using custom proxy {server}")
        return settings

    if provider not in PROVIDER_ENDPOINTS:
        raise ValueError(f"Unknown PROXY_TYPE: {provider}")

    if not config.proxy_username or not config.proxy_password:
        raise ValueError(f"PROXY_USERNAME and PROXY_PASSWORD are required for {provider}")

    default_host, default_port = PROVIDER_ENDPOINTS[provider]
    host = config.proxy_host or default_host
    port = config.proxy_port or default_port

    logger.info(f"[Session] Using {provider} proxy {host}:{port} (sticky={bool(sticky)})")
    return {
        "server": f"http://{host}:{port}",
        "username": _provider_username(provider, config.proxy_username, config.proxy_country, sticky),
        "password": config.proxy_password,
    }
