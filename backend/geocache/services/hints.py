from __future__ import annotations
import codecs


def encode_hint(hint: str | None) -> str | None:
    """ROT13 a hint for public display. Only ASCII letters move; applying twice restores it."""
    if hint is None:
        return None
    return codecs.encode(hint, "rot13")


def decode_hint(hint: str | None) -> str | None:
    return encode_hint(hint)
