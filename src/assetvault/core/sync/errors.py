"""Error taxonomy for sync passes.

Per-asset errors (``FingerprintError``, ``TransferError``, ``StateError``) are
caught and recorded in the pass report. ``ListingError`` aborts a whole pass.
"""


class SyncError(Exception):
    """Base class for sync errors."""


class FingerprintError(SyncError):
    """Local content could not be read to compute a fingerprint."""


class TransferError(SyncError):
    """A push or pull for a single asset failed."""


class ListingError(SyncError):
    """The remote asset listing could not be fetched."""


class StateError(SyncError):
    """Sync state could not be persisted after a transfer."""
