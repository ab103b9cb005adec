"""
Signature scanning over a bounded byte buffer.
"""

from __future__ import annotations


def find_signature(buffer: bytes, signature: bytes, start: int = 0) -> int:
    """Return the leftmost offset >= *start* where *signature* occurs.

    Only offsets where the whole signature fits inside *buffer* are
    considered, so a partial match at the tail is never reported.
    Returns -1 when there is no match.
    """
    if not signature:
        raise ValueError("Signature must not be empty.")
    sig_len = len(signature)
    last = len(buffer) - sig_len
    first_byte = signature[0]
    view = memoryview(buffer)
    for i in range(max(start, 0), last + 1):
        if view[i] == first_byte and view[i:i + sig_len] == signature:
            return i
    return -1
