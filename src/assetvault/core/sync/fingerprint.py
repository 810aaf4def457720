"""Content fingerprints used to detect local changes."""

import hashlib
from pathlib import Path
from typing import Union

from .errors import FingerprintError

# Chunk size for streaming large files through the hash
_CHUNK_SIZE = 64 * 1024


def fingerprint(content: bytes) -> str:
    """Compute the SHA256 hex digest of ``content``."""
    return hashlib.sha256(content).hexdigest()


def fingerprint_file(path: Union[str, Path]) -> str:
    """Compute the fingerprint of a file's current bytes.

    Args:
        path: File to fingerprint

    Returns:
        Hexadecimal SHA256 digest, equal to ``fingerprint(path.read_bytes())``

    Raises:
        FingerprintError: If the file cannot be read
    """
    sha256 = hashlib.sha256()
    try:
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
                sha256.update(chunk)
    except OSError as e:
        raise FingerprintError(f"Cannot read {path}: {e}") from e
    return sha256.hexdigest()
