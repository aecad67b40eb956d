"""MP4 (ISO-BMFF) container sniffing.

An MP4 file starts with a box whose 4-byte type field is ``ftyp``,
right after the 4-byte box size.  Finding that marker near the start
of the stream separates real video containers from HTML or JSON error
bodies without parsing the box structure.
"""

from __future__ import annotations

from sourcecheck.domain.entities import SignatureMatch

FTYP_MARKER = b"ftyp"
DEFAULT_SIGNATURE_WINDOW = 64


def detect_mp4_signature(
    data: bytes, *, window: int = DEFAULT_SIGNATURE_WINDOW
) -> SignatureMatch:
    """Find the lowest offset of ``ftyp`` within the first *window* bytes.

    >>> detect_mp4_signature(bytes.fromhex("000000186674797069736f6d"))
    SignatureMatch(has_ftyp=True, offset=4)
    >>> detect_mp4_signature(b"<!DOCTYPE html>")
    SignatureMatch(has_ftyp=False, offset=None)
    """
    head = data[: min(window, len(data))]
    marker_len = len(FTYP_MARKER)
    for offset in range(len(head) - marker_len + 1):
        if head[offset : offset + marker_len] == FTYP_MARKER:
            return SignatureMatch(has_ftyp=True, offset=offset)
    return SignatureMatch(has_ftyp=False)
