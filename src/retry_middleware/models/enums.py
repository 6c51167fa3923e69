"""Enums shared across the retry middleware."""

from enum import Enum


class DelaySource(str, Enum):
    """Where a resolved retry delay came from."""

    HEADER = "header"
    POLICY = "policy"
    FALLBACK = "fallback"
