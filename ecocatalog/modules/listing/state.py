"""
Controller state and operation outcomes
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from .models import Draft, Listing


class ControllerPhase(str, Enum):
    LOADING = "loading"
    READY = "ready"
    MUTATING = "mutating"


class MutationKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class OperationStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    # another mutation was still in flight, nothing was sent
    BUSY = "busy"
    # a newer load_all was issued before this one resolved
    SUPERSEDED = "superseded"


@dataclass(frozen=True, slots=True)
class OperationResult:
    """Outcome of a controller operation"""

    status: OperationStatus
    listing: Optional[Listing] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is OperationStatus.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "listing": self.listing.to_dict() if self.listing else None,
            "error": self.error,
        }


@dataclass(frozen=True, slots=True)
class CatalogView:
    """
    Read-only snapshot handed to the presentation layer

    `draft` is a copy; editing it does not change controller state.
    """

    listings: Tuple[Listing, ...] = ()
    draft: Optional[Draft] = None
    editing_id: Optional[str] = None
    form_open: bool = False
    phase: ControllerPhase = ControllerPhase.LOADING
    pending: Optional[MutationKind] = None
    error: Optional[str] = None

    @property
    def is_mutating(self) -> bool:
        return self.pending is not None

    @property
    def is_loading(self) -> bool:
        return self.phase is ControllerPhase.LOADING

    @property
    def current_draft(self) -> Optional[Draft]:
        return self.draft

    def to_dict(self) -> Dict[str, Any]:
        return {
            "listings": [listing.to_dict() for listing in self.listings],
            "draft": self.draft.to_dict() if self.draft else None,
            "editing_id": self.editing_id,
            "form_open": self.form_open,
            "phase": self.phase.value,
            "is_mutating": self.is_mutating,
            "error": self.error,
        }
