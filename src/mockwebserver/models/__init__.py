"""Value types exchanged between test code and the server."""

from .request import HeaderMap, RecordedRequest
from .response import Body, ChunkSource, FileChunks, MockResponse

__all__ = [
    "Body",
    "ChunkSource",
    "FileChunks",
    "HeaderMap",
    "MockResponse",
    "RecordedRequest",
]
