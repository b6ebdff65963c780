import hashlib
import time

_DIGITS = '0123456789abcdefghijklmnopqrstuvwxyz'


def to_base36(value: int) -> str:
    if value == 0:
        return '0'
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(_DIGITS[rem])
    return ''.join(reversed(out))


def make_device_id(fingerprint_parts, now_ms=None) -> str:
    """Opaque per-device token: fingerprint hash plus issue time, both base36.

    Callers cache the token; the same fingerprint at a different time gives a
    different token.
    """
    fingerprint = '|'.join('' if p is None else str(p) for p in fingerprint_parts)
    digest = int(hashlib.sha256(fingerprint.encode('utf-8')).hexdigest()[:12], 16)
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"device_{to_base36(digest)}_{to_base36(int(now_ms))}"
