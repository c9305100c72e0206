"""nourish — meal and hydration reminder scheduling engine."""

__version__ = "0.1.0"
