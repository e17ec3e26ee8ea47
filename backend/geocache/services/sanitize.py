from __future__ import annotations
from typing import Protocol
import nh3


class Sanitizer(Protocol):
    def __call__(self, text: str) -> str: ...


def clean_markup(text: str) -> str:
    """Drop scripts, event handlers and unknown tags; keep a safe formatting allow-list."""
    return nh3.clean(text)
