"""
Package version (PEP 440); also sent in the RPC clients' User-Agent header.
"""

# Bump this when publishing
__version__ = "0.3.0"

__all__ = ["__version__"]
