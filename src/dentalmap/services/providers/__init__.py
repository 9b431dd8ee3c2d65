"""Provider verification services."""

from .invisalign import directory_score, estimate_provider, verify_provider

__all__ = ["directory_score", "estimate_provider", "verify_provider"]
