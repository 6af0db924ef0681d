"""Construction-time configuration of a MockWebServer."""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .http.tls import Certificate


class AddressFamily(Enum):
    """Loopback address the server binds to."""
    IPV4 = "127.0.0.1"
    IPV6 = "::1"

    @property
    def host(self) -> str:
        return self.value


@dataclass(frozen=True)
class ServerConfig:
    """
    Attributes:
        port: Port to bind, 0 picks an ephemeral one
        certificate: TLS identity; when set the server speaks HTTPS
        address_family: IPv4 or IPv6 loopback
        max_header_bytes: Largest request head accepted before answering 400
        fail_fast: Let a failed exchange tear down the whole server instead
            of answering 500 and carrying on
    """
    port: int = 0
    certificate: Optional["Certificate"] = None
    address_family: AddressFamily = AddressFamily.IPV4
    max_header_bytes: int = 64 * 1024
    fail_fast: bool = False

    def __post_init__(self):
        if not 0 <= self.port <= 65535:
            raise ValueError(f"port out of range: {self.port}")
        if self.max_header_bytes <= 0:
            raise ValueError("max_header_bytes must be positive")

    @property
    def host(self) -> str:
        return self.address_family.host

    @property
    def is_secure(self) -> bool:
        return self.certificate is not None
