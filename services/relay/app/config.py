import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_STUN_URL = "stun:stun.l.google.com:19302"


@dataclass(frozen=True)
class RelaySettings:
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origin: str = "*"
    stun_url: str = DEFAULT_STUN_URL
    turn_url: Optional[str] = None
    turn_username: Optional[str] = None
    turn_password: Optional[str] = None
    log_level: str = "INFO"
    outbound_queue_size: int = 200

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RelaySettings":
        env = os.environ if environ is None else environ
        return cls(
            host=env.get("HOST", "0.0.0.0"),
            port=int(env.get("PORT", "3000")),
            cors_origin=env.get("CORS_ORIGIN", "*"),
            stun_url=env.get("STUN_URL", DEFAULT_STUN_URL),
            turn_url=env.get("TURN_URL") or None,
            turn_username=env.get("TURN_USERNAME") or None,
            turn_password=env.get("TURN_PASSWORD") or None,
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            outbound_queue_size=int(env.get("OUTBOUND_QUEUE_SIZE", "200")),
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    # basicConfig is a no-op once the root logger has handlers
    logging.getLogger().setLevel(level)
