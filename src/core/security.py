"""
Identifier generation and secret masking helpers.
"""

import secrets
import time


def generate_request_id() -> str:
    """
    Generate a unique request ID for tracing.

    Returns:
        A random 8-byte hex string prefixed with 'req_'
    """
    return f"req_{secrets.token_hex(8)}"


def generate_file_id() -> str:
    """
    Generate an identifier for a stored file.

    Base-36 millisecond timestamp followed by six random hex digits. The id
    never contains a hyphen, so a stored ``{id}-{name}`` file name splits
    back on its first hyphen.
    """
    millis = int(time.time() * 1000)
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    encoded = ""
    while millis:
        millis, rem = divmod(millis, 36)
        encoded = digits[rem] + encoded
    return f"{encoded or '0'}{secrets.token_hex(3)}"


def mask_secret(value: str, visible: int = 4) -> str:
    """Mask all but the last few characters of a secret."""
    if not value:
        return ""
    if len(value) <= visible * 2:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]
