"""Tests for content fingerprints."""

import hashlib

import pytest

from assetvault.core.sync import FingerprintError, fingerprint, fingerprint_file


class TestFingerprint:
    """Test fingerprint()."""

    def test_equal_content_gives_equal_digest(self):
        """Same bytes always hash the same."""
        assert fingerprint(b"# Deploy skill\n") == fingerprint(b"# Deploy skill\n")

    def test_different_content_gives_different_digest(self):
        """A one-byte change produces a different digest."""
        assert fingerprint(b"version A") != fingerprint(b"version B")
        assert fingerprint(b"abc") != fingerprint(b"abc ")

    def test_digest_is_sha256_hex(self):
        """Digest is a 64 character lowercase hex string."""
        digest = fingerprint(b"hello")
        assert digest == hashlib.sha256(b"hello").hexdigest()
        assert len(digest) == 64
        assert all(c in "0123456789abcdef" for c in digest)

    def test_empty_content(self):
        """Empty content has a well-defined digest."""
        assert fingerprint(b"") == hashlib.sha256(b"").hexdigest()

    def test_utf8_text_matches_encoded_bytes(self):
        """Text assets hash as their UTF-8 bytes."""
        text = "Résumé — ünïcode"
        assert fingerprint(text.encode("utf-8")) == (
            hashlib.sha256(text.encode("utf-8")).hexdigest()
        )


class TestFingerprintFile:
    """Test fingerprint_file()."""

    def test_matches_fingerprint_of_bytes(self, tmp_path):
        """File digest equals the digest of its bytes."""
        path = tmp_path / "notes.txt"
        path.write_bytes(b"some notes\n")
        assert fingerprint_file(path) == fingerprint(b"some notes\n")

    def test_large_file_streamed(self, tmp_path):
        """Files larger than one chunk hash correctly."""
        content = b"x" * (256 * 1024 + 17)
        path = tmp_path / "big.bin"
        path.write_bytes(content)
        assert fingerprint_file(path) == fingerprint(content)

    def test_missing_file_raises(self, tmp_path):
        """Unreadable content raises FingerprintError."""
        with pytest.raises(FingerprintError, match="Cannot read"):
            fingerprint_file(tmp_path / "missing.txt")

    def test_directory_raises(self, tmp_path):
        """A directory is not readable content."""
        with pytest.raises(FingerprintError):
            fingerprint_file(tmp_path)
