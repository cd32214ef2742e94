"""Chat server helpers: message records, IM service client, caches, sequences and context."""

__version__ = "0.1.0"