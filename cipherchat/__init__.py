"""Terminal chat server and client with an AES-GCM encrypted line protocol."""

__version__ = "0.1.0"
__all__ = ["__version__"]