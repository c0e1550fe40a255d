"""Typed command values, reading and write-parameter transforms, and protocol driver interfaces."""

__version__ = "0.1.0"

__all__ = ["commandvalue", "models", "valuerange", "transform", "writeparam"]