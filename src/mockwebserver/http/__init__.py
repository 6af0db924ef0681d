"""HTTP serving: wire framing, response pipeline, dispatch and the server loop."""

from .dispatch import Dispatcher, Resolver
from .pipeline import Exchange, ResponsePipeline
from .server import MockWebServer
from .tls import Certificate

__all__ = [
    "Certificate",
    "Dispatcher",
    "Exchange",
    "MockWebServer",
    "Resolver",
    "ResponsePipeline",
]
