"""Route group exports."""

from . import config, health, market, territories

__all__ = ["territories", "health", "config", "market"]
