"""Utilities for bounding free text before it is copied into HubSpot notes."""

from gitspot_sync.utils.constants import TRUNCATION_SUFFIX


def truncate_text(text: str, max_length: int, suffix: str = TRUNCATION_SUFFIX) -> str:
    """Cut ``text`` down to at most ``max_length`` characters.

    Text that already fits is returned unchanged. Otherwise the head of the text
    is kept and ``suffix`` is appended, with the suffix counted against
    ``max_length``. A limit shorter than the suffix keeps only as much of the
    suffix as fits.
    """
    if max_length < 0:
        raise ValueError(f"max_length must not be negative, got {max_length}")
    if len(text) <= max_length:
        return text
    keep = max(max_length - len(suffix), 0)
    return text[:keep] + suffix[: max_length - keep]
