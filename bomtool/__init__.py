"""Synthesize, store and export bills of materials."""

__version__ = "0.1.0"