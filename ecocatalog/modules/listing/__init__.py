"""
Listing Module

Listing models, draft normalization, the lifecycle controller and its HTTP transport
"""

from .controller import ListingController
from .models import Draft, ImageAttachment, Listing, MutationRequest
from .normalizer import blank_draft, to_draft
from .state import CatalogView, ControllerPhase, MutationKind, OperationResult, OperationStatus
from .transport import HttpCatalogTransport

__all__ = [
    "CatalogView",
    "ControllerPhase",
    "Draft",
    "HttpCatalogTransport",
    "ImageAttachment",
    "Listing",
    "ListingController",
    "MutationKind",
    "MutationRequest",
    "OperationResult",
    "OperationStatus",
    "blank_draft",
    "to_draft",
]
