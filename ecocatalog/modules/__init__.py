"""
Modules

Domain modules of the catalog client
"""

from .interfaces import ICatalogTransport
from .listing.controller import ListingController
from .listing.transport import HttpCatalogTransport

__all__ = [
    "HttpCatalogTransport",
    "ICatalogTransport",
    "ListingController",
]
