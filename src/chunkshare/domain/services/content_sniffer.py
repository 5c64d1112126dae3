"""Content-type sniffing from a byte prefix.

Heuristic, not authoritative. Rules are checked in order and the first
match wins. Known gap: any payload starting with three zero bytes is
reported as ``video/mp4``, which misclassifies other binary formats with a
zero prefix (e.g. some ICO/TGA files).
"""

from __future__ import annotations

OCTET_STREAM = "application/octet-stream"

SNIFF_LENGTH = 12

# (offset, magic, media type)
_SIGNATURES: tuple[tuple[int, bytes, str], ...] = (
    (0, b"\xff\xd8\xff", "image/jpeg"),
    (0, b"\x89PNG", "image/png"),
    (0, b"GIF", "image/gif"),
    (0, b"RIFF", "image/webp"),
    (4, b"ftyp", "video/mp4"),
    (0, b"\x00\x00\x00", "video/mp4"),
)

KNOWN_TYPES = frozenset(media_type for _, _, media_type in _SIGNATURES) | {OCTET_STREAM}


def sniff_content_type(head: bytes) -> str:
    """Guess a media type from the first bytes of a payload.

    Args:
        head: Payload prefix; at least 12 bytes for every rule to apply.
            Shorter input only matches rules it fully covers.

    Returns:
        One of ``KNOWN_TYPES``.
    """
    head = bytes(head[:SNIFF_LENGTH])
    for offset, magic, media_type in _SIGNATURES:
        if head[offset:offset + len(magic)] == magic:
            return media_type
    return OCTET_STREAM
