"""
kbaserpc - dual-dialect JSON-RPC client with dynamic service resolution
"""

__version__ = "0.1.0"
