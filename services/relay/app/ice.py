from typing import Any, Dict, List

from .config import RelaySettings


def build_ice_servers(settings: RelaySettings) -> List[Dict[str, Any]]:
    """
    STUN is always offered. A TURN relay is added only when the URL and both
    credentials are configured; bare host names get the ``turn:`` scheme.
    """
    servers: List[Dict[str, Any]] = [{"urls": settings.stun_url}]

    if settings.turn_url and settings.turn_username and settings.turn_password:
        turn_url = settings.turn_url
        if not turn_url.startswith(("turn:", "turns:")):
            turn_url = "turn:" + turn_url
        servers.append(
            {
                "urls": turn_url,
                "username": settings.turn_username,
                "credential": settings.turn_password,
            }
        )
    return servers
