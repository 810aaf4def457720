"""Local filesystem access for asset replicas."""

import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class LocalAssetStore:
    """Reads and writes asset content on the local filesystem.

    Writes go to a temporary file next to the target and are moved into
    place with ``os.replace`` so a failed write never leaves a partial file.
    """

    def read_content(self, path: PathLike) -> bytes:
        """Read the raw bytes of a local replica.

        Raises:
            OSError: If the file cannot be read
        """
        return Path(path).read_bytes()

    def write_content(self, path: PathLike, content: bytes) -> None:
        """Atomically replace the content of a local replica.

        Missing parent directories are created.

        Raises:
            OSError: If the file cannot be written
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{target.name}.", suffix=".tmp", dir=target.parent
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, target)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise

        logger.debug("Wrote %d bytes to %s", len(content), target)

    def modified_at(self, path: PathLike) -> datetime:
        """Get the last-modified time of a local replica in UTC.

        Raises:
            OSError: If the file cannot be stat'ed
        """
        mtime = Path(path).stat().st_mtime
        return datetime.fromtimestamp(mtime, tz=timezone.utc)

    def exists(self, path: PathLike) -> bool:
        """Whether a local replica exists."""
        return Path(path).is_file()
