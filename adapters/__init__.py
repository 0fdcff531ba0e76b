"""
Adapters package - External resources.
Local asset storage and QR code rendering.
"""

from adapters import storage, qr_adapter

__all__ = [
    "storage",
    "qr_adapter",
]
