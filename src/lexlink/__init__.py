"""lexlink - entity connection graph and deadline engine for a small legal practice."""

__version__ = "0.1.0"
