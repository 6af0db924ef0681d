"""Recorded requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import parse_qs, urlsplit

HeaderMap = dict[str, str]


@dataclass(frozen=True, slots=True)
class RecordedRequest:
    """A request as the server received it.

    Header names are lower-cased and repeated headers are joined with ", ".
    `body` is the UTF-8 decoding of `raw_body`; undecodable bytes are replaced.
    """

    method: str
    uri: str
    version: str
    headers: HeaderMap = field(default_factory=dict)
    raw_body: bytes = b""
    sequence_number: int = 0

    @property
    def body(self) -> str:
        return self.raw_body.decode("utf-8", errors="replace")

    @property
    def path(self) -> str:
        return urlsplit(self.uri).path

    @property
    def query(self) -> dict[str, list[str]]:
        return parse_qs(urlsplit(self.uri).query, keep_blank_values=True)

    def header(self, name: str, default: str | None = None) -> str | None:
        return self.headers.get(name.lower(), default)
