"""
ecocatalog CLI

Command-line front end for the listing controller. Every command prints JSON.

Usage:
    python -m ecocatalog.cli list
    python -m ecocatalog.cli browse
    python -m ecocatalog.cli draft --id p1
    python -m ecocatalog.cli create --name "Compost Bin" --cost-price 50 --selling-price 80 --stock 10 --images bin.jpg
    python -m ecocatalog.cli create --csv products.csv
    python -m ecocatalog.cli update --id p1 --selling-price 75 --inactive
    python -m ecocatalog.cli delete --id p1 --yes
"""

import argparse
import asyncio
import json
import sys
from dataclasses import replace
from typing import Any, Optional

from ecocatalog.core.config import get_config
from ecocatalog.modules.listing.controller import ListingController
from ecocatalog.modules.listing.models import Draft, ImageAttachment, Listing, MutationRequest
from ecocatalog.modules.listing.normalizer import blank_draft, to_draft
from ecocatalog.modules.listing.state import OperationResult
from ecocatalog.modules.listing.transport import HttpCatalogTransport
from ecocatalog.modules.listing.utils import load_requests_from_csv

_DRAFT_OVERRIDES = {
    "name": "name",
    "description": "description",
    "category": "category",
    "cost_price": "cost_price",
    "selling_price": "selling_price",
    "stock": "current_stock",
    "recycled": "recycled_material_percentage",
    "active": "is_active",
}


def _json_out(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2, default=str))


def _build_transport(args: argparse.Namespace) -> HttpCatalogTransport:
    catalog = dict(get_config(args.config).catalog)
    if args.base_url:
        catalog["base_url"] = args.base_url
    return HttpCatalogTransport.from_config(catalog)


def _summarize(listing: Listing) -> dict[str, Any]:
    fallback = get_config().get("display.fallback_image", "/logo192.png")
    return {
        "id": listing.listing_id,
        "name": listing.name,
        "category": listing.product_info.category,
        "selling_price": listing.pricing.selling_price,
        "stock": listing.inventory.current_stock,
        "recycled_percentage": listing.sustainability.recycled_material_percentage,
        "status": listing.status_label,
        "image": listing.cover_image(fallback),
    }


def _result_out(controller: ListingController, result: OperationResult) -> bool:
    view = controller.view
    _json_out(
        {
            "status": result.status.value,
            "listing": _summarize(result.listing) if result.listing else None,
            "listings": [_summarize(item) for item in view.listings],
            "error": result.error or view.error,
        }
    )
    return result.ok


def _apply_overrides(draft: Draft, args: argparse.Namespace) -> Draft:
    changes = {}
    for arg_name, field_name in _DRAFT_OVERRIDES.items():
        value = getattr(args, arg_name, None)
        if value is not None:
            changes[field_name] = value
    if getattr(args, "drop_images", False):
        changes["images"] = []
    return replace(draft, **changes)


def _attachments(args: argparse.Namespace) -> tuple:
    return tuple(ImageAttachment.from_path(path) for path in (args.images or []))


def _find(controller: ListingController, listing_id: str) -> Optional[Listing]:
    for listing in controller.listings:
        if listing.listing_id == listing_id:
            return listing
    return None


async def cmd_list(args: argparse.Namespace) -> bool:
    async with _build_transport(args) as transport:
        controller = ListingController(transport)
        result = await controller.load_all()
        return _result_out(controller, result)


async def cmd_browse(args: argparse.Namespace) -> bool:
    async with _build_transport(args) as transport:
        listings = await transport.browse_marketplace()
        _json_out({"listings": [_summarize(item) for item in listings]})
        return True


async def cmd_draft(args: argparse.Namespace) -> bool:
    async with _build_transport(args) as transport:
        controller = ListingController(transport)
        result = await controller.load_all()
        if not result.ok:
            return _result_out(controller, result)

        listing = _find(controller, args.id)
        if listing is None:
            _json_out({"error": f"Listing {args.id} not found"})
            return False
        _json_out({"id": listing.listing_id, "draft": to_draft(listing).to_dict()})
        return True


async def cmd_create(args: argparse.Namespace) -> bool:
    config = get_config(args.config)
    async with _build_transport(args) as transport:
        controller = ListingController(transport)

        if args.csv:
            requests = load_requests_from_csv(args.csv, defaults=config.draft_defaults)
            results = []
            for request in requests:
                controller.begin_create()
                results.append(await controller.create(request))
            _json_out(
                {
                    "created": sum(1 for r in results if r.ok),
                    "total": len(results),
                    "results": [r.to_dict() for r in results],
                }
            )
            return all(r.ok for r in results)

        if not args.name:
            _json_out({"error": "--name is required unless --csv is given"})
            return False

        controller.begin_create()
        draft = _apply_overrides(blank_draft(config.draft_defaults), args)
        controller.update_draft(draft)
        result = await controller.create(MutationRequest(draft=draft, images=_attachments(args)))
        return _result_out(controller, result)


async def cmd_update(args: argparse.Namespace) -> bool:
    async with _build_transport(args) as transport:
        controller = ListingController(transport)
        result = await controller.load_all()
        if not result.ok:
            return _result_out(controller, result)

        listing = _find(controller, args.id)
        if listing is None:
            _json_out({"error": f"Listing {args.id} not found"})
            return False

        draft = _apply_overrides(controller.begin_edit(listing), args)
        controller.update_draft(draft)
        result = await controller.update(
            listing.listing_id, MutationRequest(draft=draft, images=_attachments(args))
        )
        return _result_out(controller, result)


async def cmd_delete(args: argparse.Namespace) -> bool:
    if not args.yes:
        _json_out({"error": f"Deleting {args.id} needs confirmation, re-run with --yes"})
        return False

    async with _build_transport(args) as transport:
        controller = ListingController(transport)
        result = await controller.delete(args.id)
        return _result_out(controller, result)


def _add_draft_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument("--name", default=None, help="Product name")
    p.add_argument("--description", default=None, help="Description")
    p.add_argument("--category", default=None, help="Category")
    p.add_argument("--cost-price", type=float, default=None, help="Cost price")
    p.add_argument("--selling-price", type=float, default=None, help="Selling price")
    p.add_argument("--stock", type=int, default=None, help="Current stock")
    p.add_argument("--recycled", type=float, default=None, help="Recycled material percentage (0-100)")
    status = p.add_mutually_exclusive_group()
    status.add_argument("--active", dest="active", action="store_const", const=True, default=None)
    status.add_argument("--inactive", dest="active", action="store_const", const=False)
    p.add_argument("--images", nargs="*", default=[], help="Image files to upload")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ecocatalog",
        description="Marketplace product catalog CLI",
    )
    parser.add_argument("--config", default=None, help="Configuration file")
    parser.add_argument("--base-url", default=None, help="Override catalog.base_url")
    sub = parser.add_subparsers(dest="command", help="Commands")

    sub.add_parser("list", help="List the managed listings")
    sub.add_parser("browse", help="Browse the aggregated marketplace")

    p = sub.add_parser("draft", help="Show the edit draft of a listing")
    p.add_argument("--id", required=True, help="Listing ID")

    p = sub.add_parser("create", help="Create a listing")
    _add_draft_arguments(p)
    p.add_argument("--csv", default=None, help="Create one listing per CSV row")

    p = sub.add_parser("update", help="Update a listing")
    p.add_argument("--id", required=True, help="Listing ID")
    _add_draft_arguments(p)
    p.add_argument("--drop-images", action="store_true", help="Remove the existing images")

    p = sub.add_parser("delete", help="Delete a listing")
    p.add_argument("--id", required=True, help="Listing ID")
    p.add_argument("--yes", action="store_true", help="Confirm the deletion")

    return parser


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    dispatch = {
        "list": cmd_list,
        "browse": cmd_browse,
        "draft": cmd_draft,
        "create": cmd_create,
        "update": cmd_update,
        "delete": cmd_delete,
    }

    handler = dispatch.get(args.command)
    if handler is None:
        parser.print_help()
        sys.exit(1)

    try:
        ok = asyncio.run(handler(args))
    except KeyboardInterrupt:
        sys.exit(130)
    except Exception as e:
        _json_out({"error": str(e)})
        sys.exit(1)

    if not ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
