"""
ecocatalog

Marketplace product-catalog client: listing lifecycle and synchronization.
"""

__version__ = "1.0.0"
