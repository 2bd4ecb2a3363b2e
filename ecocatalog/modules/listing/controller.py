"""
Listing Lifecycle Controller

Owns the local listing collection, sequences create/update/delete against the
catalog transport and resynchronizes with a full fetch after every mutation.
"""

import asyncio
from dataclasses import replace
from typing import Awaitable, Callable, List, Optional, Tuple

from ecocatalog.core.error_handler import describe_error
from ecocatalog.core.logger import get_logger
from ecocatalog.modules.interfaces import ICatalogTransport

from .models import Draft, Listing, MutationRequest
from .normalizer import to_draft
from .state import (
    CatalogView,
    ControllerPhase,
    MutationKind,
    OperationResult,
    OperationStatus,
)

Subscriber = Callable[[CatalogView], None]


def _copy_draft(draft: Optional[Draft]) -> Optional[Draft]:
    if draft is None:
        return None
    return replace(draft, images=list(draft.images))


class ListingController:
    """
    Listing lifecycle controller

    One instance per catalog session. All transitions run on the event loop
    that awaits the operations; transport calls are the only suspension points.

    Phases: LOADING -> READY -> MUTATING -> READY. Public operations never
    raise; each resolves to an OperationResult and leaves any failure message
    in the view until the next successful operation or dismiss_error().
    """

    def __init__(self, transport: ICatalogTransport):
        """
        Args:
            transport: catalog transport performing the network calls
        """
        self.transport = transport
        self.logger = get_logger()

        self._listings: Tuple[Listing, ...] = ()
        self._draft: Optional[Draft] = None
        self._editing_id: Optional[str] = None
        self._form_open = False
        self._pending: Optional[MutationKind] = None
        self._error: Optional[str] = None
        self._loading = True
        self._load_seq = 0
        self._subscribers: List[Subscriber] = []

    # ------------------------------------------------------------------ state

    @property
    def phase(self) -> ControllerPhase:
        if self._pending is not None:
            return ControllerPhase.MUTATING
        if self._loading:
            return ControllerPhase.LOADING
        return ControllerPhase.READY

    @property
    def listings(self) -> Tuple[Listing, ...]:
        return self._listings

    @property
    def editing(self) -> Optional[Listing]:
        """Listing under edit, resolved by identifier against the current collection"""
        if self._editing_id is None:
            return None
        for listing in self._listings:
            if listing.listing_id == self._editing_id:
                return listing
        return None

    @property
    def view(self) -> CatalogView:
        return CatalogView(
            listings=self._listings,
            draft=_copy_draft(self._draft),
            editing_id=self._editing_id,
            form_open=self._form_open,
            phase=self.phase,
            pending=self._pending,
            error=self._error,
        )

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback invoked with a fresh view after every state change

        Returns:
            Function removing the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        if not self._subscribers:
            return
        view = self.view
        for callback in list(self._subscribers):
            try:
                callback(view)
            except Exception:
                self.logger.exception(f"Subscriber {callback!r} failed")

    # ---------------------------------------------------------------- loading

    async def load_all(self) -> OperationResult:
        """
        Replace the collection with the server's full listing

        Only the most recently issued call may write state; calls overtaken
        by a newer one resolve SUPERSEDED without touching anything.
        """
        self._load_seq += 1
        seq = self._load_seq
        self._loading = True
        self._notify()
        self.logger.info(f"Loading listings (request #{seq})")

        try:
            listings = await self.transport.list_listings()
        except asyncio.CancelledError:
            if seq == self._load_seq:
                self.logger.warning(f"Request #{seq} cancelled")
                self._loading = False
                self._notify()
            raise
        except Exception as e:
            if seq != self._load_seq:
                self.logger.debug(f"Discarding stale failure of request #{seq}: {e}")
                return OperationResult(OperationStatus.SUPERSEDED)
            message = describe_error(e, "load products")
            self.logger.error(message)
            self._listings = ()
            self._error = message
            self._loading = False
            self._notify()
            return OperationResult(OperationStatus.FAILED, error=message)

        if seq != self._load_seq:
            self.logger.debug(f"Discarding stale response of request #{seq}")
            return OperationResult(OperationStatus.SUPERSEDED)

        self._listings = tuple(listings)
        self._error = None
        self._loading = False
        self._notify()
        self.logger.info(f"Loaded {len(self._listings)} listings")
        return OperationResult(OperationStatus.SUCCESS)

    # -------------------------------------------------------------- mutations

    async def create(self, request: MutationRequest) -> OperationResult:
        """
        Create a listing, then resynchronize and close the form

        Args:
            request: draft metadata and new image attachments

        Returns:
            OperationResult carrying the persisted listing on success
        """
        return await self._mutate(
            MutationKind.CREATE,
            "save product",
            lambda: self.transport.create_listing(request),
            draft=request.draft,
        )

    async def update(self, listing_id: str, request: MutationRequest) -> OperationResult:
        """
        Update a listing, then resynchronize and close the form

        Unknown identifiers are left for the server to reject.

        Args:
            listing_id: listing to update
            request: draft metadata and new image attachments
        """
        return await self._mutate(
            MutationKind.UPDATE,
            "save product",
            lambda: self.transport.update_listing(listing_id, request),
            draft=request.draft,
        )

    async def delete(self, listing_id: str) -> OperationResult:
        """
        Delete a listing, then resynchronize

        The caller is responsible for having obtained confirmation.

        Args:
            listing_id: listing to delete
        """
        return await self._mutate(
            MutationKind.DELETE,
            "delete product",
            lambda: self.transport.delete_listing(listing_id),
            target_id=listing_id,
        )

    async def _mutate(self, kind: MutationKind, action: str,
                      call: Callable[[], Awaitable[Optional[Listing]]],
                      draft: Optional[Draft] = None,
                      target_id: Optional[str] = None) -> OperationResult:
        if self._pending is not None:
            self.logger.warning(f"Rejected {kind.value}: {self._pending.value} already in flight")
            return OperationResult(
                OperationStatus.BUSY,
                error=f"Another {self._pending.value} is still in progress",
            )

        self._pending = kind
        if draft is not None:
            self._draft = _copy_draft(draft)
            self._form_open = True
        self._notify()
        self.logger.info(f"Submitting {kind.value}" + (f" for {target_id}" if target_id else ""))

        try:
            try:
                listing = await call()
            except Exception as e:
                message = describe_error(e, action)
                self.logger.error(message)
                self._error = message
                return OperationResult(OperationStatus.FAILED, error=message)

            self.logger.success(f"{kind.value.capitalize()} succeeded")
            self._error = None
            if kind is not MutationKind.DELETE or self._editing_id == target_id:
                self._clear_edit()

            await self.load_all()
            return OperationResult(OperationStatus.SUCCESS, listing=listing)
        except asyncio.CancelledError:
            self.logger.warning(f"{kind.value.capitalize()} cancelled")
            raise
        finally:
            self._pending = None
            self._notify()

    # ---------------------------------------------------------------- editing

    def begin_create(self) -> None:
        """Open the form for a new listing"""
        self._editing_id = None
        self._draft = None
        self._form_open = True
        self._notify()

    def begin_edit(self, listing: Listing) -> Optional[Draft]:
        """
        Point the form at a listing and derive its draft

        Returns:
            Copy of the derived draft
        """
        self._editing_id = listing.listing_id
        self._draft = to_draft(listing)
        self._form_open = True
        self._notify()
        return _copy_draft(self._draft)

    def update_draft(self, draft: Draft) -> None:
        """Record the form's current input"""
        self._draft = _copy_draft(draft)
        self._notify()

    def cancel_edit(self) -> None:
        if self._editing_id is None and self._draft is None and not self._form_open:
            return
        self._clear_edit()
        self._notify()

    def dismiss_error(self) -> None:
        if self._error is None:
            return
        self._error = None
        self._notify()

    def _clear_edit(self) -> None:
        self._editing_id = None
        self._draft = None
        self._form_open = False

    # presentation-layer intents
    request_refresh = load_all
    request_create = create
    request_update = update
    request_delete = delete
    request_edit = begin_edit
    request_cancel_edit = cancel_edit
