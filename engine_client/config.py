"""Configuration for the Engine API client."""

from dataclasses import dataclass
from typing import Optional

DEFAULT_ENDPOINT = "http://localhost:8551"
DEFAULT_TIMEOUT = 8.0


@dataclass
class Config:
    """Client configuration."""

    endpoint: str = DEFAULT_ENDPOINT
    jwt_secret_path: str = ""
    timeout: Optional[float] = DEFAULT_TIMEOUT
    log_level: str = "INFO"
    metrics_port: int = 0

    @property
    def jwt_secret(self) -> Optional[bytes]:
        if not self.jwt_secret_path:
            return None
        with open(self.jwt_secret_path, "rb") as f:
            return bytes.fromhex(f.read().decode().strip().removeprefix("0x"))
