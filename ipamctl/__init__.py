"""IP address management controller with an in-memory IPAM resource store, informers and client."""

__version__ = "0.1.0"
__all__ = ["__version__"]