"""Core building blocks: scalar codecs, quantities, dynamic tree helpers and errors."""

from kubeshape.core.errors import DecodeError

__all__ = ["DecodeError"]
