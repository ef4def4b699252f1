"""Open-interest momentum / acceleration classification engine."""

__version__ = "0.1.0"
