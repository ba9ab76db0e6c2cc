"""Content digests used by devices to verify a downloaded image."""
import hashlib
import hmac


def digest(data: bytes) -> str:
    """Return the lowercase SHA256 hex digest (64 chars) of ``data``."""
    return hashlib.sha256(data).hexdigest()


def verify(data: bytes, expected: str) -> bool:
    return hmac.compare_digest(digest(data).encode("ascii"), expected.lower().encode("utf-8"))
