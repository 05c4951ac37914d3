"""Typed-content recency registry (independent of the chain builder)."""

from .typed_content import TypedContentRegistry, fast_hash

__all__ = ["TypedContentRegistry", "fast_hash"]
