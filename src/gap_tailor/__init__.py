"""Resume tailoring with interactive gap analysis."""

__version__ = "0.1.0"
