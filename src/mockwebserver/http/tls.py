"""TLS identity for HTTPS mock servers."""

from __future__ import annotations

import os
import ssl
import tempfile
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Certificate:
    """
    Server certificate chain and private key, as PEM bytes.

    Clients must be told to trust the chain (or its CA) separately.
    """
    chain: bytes
    key: bytes
    password: str | bytes | None = None

    @classmethod
    def from_files(
        cls,
        chain_path: str | os.PathLike[str],
        key_path: str | os.PathLike[str],
        password: str | bytes | None = None,
    ) -> "Certificate":
        return cls(
            chain=Path(chain_path).read_bytes(),
            key=Path(key_path).read_bytes(),
            password=password,
        )

    def ssl_context(self) -> ssl.SSLContext:
        """Build a server-side SSLContext from the PEM bytes."""
        context = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
        # load_cert_chain() only reads from the filesystem.
        with tempfile.TemporaryDirectory(prefix="mockwebserver-") as tmp:
            chain_file = Path(tmp, "chain.pem")
            key_file = Path(tmp, "key.pem")
            chain_file.write_bytes(self.chain)
            key_file.write_bytes(self.key)
            os.chmod(key_file, 0o600)
            context.load_cert_chain(chain_file, key_file, password=self.password)
        return context
