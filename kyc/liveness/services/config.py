import base64
import binascii
from dataclasses import dataclass
from typing import Optional

import httpx

PAYLOAD_SIZES = ("small", "normal", "extended")


def check_license(key: Optional[str]) -> Optional[str]:
    """
    État "licence" du SDK : None si la clé est exploitable, sinon le message d'erreur.
    La validation réelle reste dans le SDK ; ici on ne vérifie que le format.
    """
    if not key:
        return "License key is not configured."
    try:
        base64.b64decode(key, validate=True)
    except (binascii.Error, ValueError):
        return "License key is malformed."
    return None


@dataclass(frozen=True)
class CaptureConfig:
    """Configuration d'une capture, passée explicitement aux sessions et services."""
    server_url: str
    preview_enabled: bool = True
    payload_size: str = "normal"
    license_error: Optional[str] = None
    min_probability: Optional[float] = 0.5
    connect_timeout_s: float = 180.0
    read_timeout_s: float = 180.0
    write_timeout_s: float = 180.0
    pool_timeout_s: float = 240.0
    verbose_http: bool = False

    def __post_init__(self):
        if self.payload_size not in PAYLOAD_SIZES:
            raise ValueError(f"payload_size must be one of {', '.join(PAYLOAD_SIZES)}")

    @property
    def timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            connect=self.connect_timeout_s,
            read=self.read_timeout_s,
            write=self.write_timeout_s,
            pool=self.pool_timeout_s,
        )

    @classmethod
    def from_settings(cls, settings) -> "CaptureConfig":
        timeouts = getattr(settings, "LIVENESS_TIMEOUTS", {}) or {}
        return cls(
            server_url=settings.LIVENESS_SERVER_URL,
            preview_enabled=getattr(settings, "LIVENESS_PREVIEW_ENABLED", True),
            payload_size=getattr(settings, "LIVENESS_PAYLOAD_SIZE", "normal"),
            license_error=check_license(getattr(settings, "LIVENESS_LICENSE_KEY", "")),
            min_probability=getattr(settings, "LIVENESS_MIN_PROBABILITY", 0.5),
            connect_timeout_s=timeouts.get("connect", 180.0),
            read_timeout_s=timeouts.get("read", 180.0),
            write_timeout_s=timeouts.get("write", 180.0),
            pool_timeout_s=timeouts.get("pool", 240.0),
            verbose_http=getattr(settings, "LIVENESS_HTTP_VERBOSE", False),
        )
