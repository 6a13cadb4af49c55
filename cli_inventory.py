"""Terminal client that reuses the in-process inventory pipeline."""
from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import Iterable

from inventory_api.config import settings
from inventory_api.errors import InventoryError
from inventory_api.es_client import get_client
from inventory_api.importer import reindex_catalog
from inventory_api.models import ResultEnvelope
from inventory_api.search_service import get_service

GREEN = "\033[92m"
RED = "\033[91m"
RESET = "\033[0m"


def run_query(params: dict) -> object:
    try:
        return get_service(settings).handle(params)
    except InventoryError as exc:
        return {"error": exc.message, "status": exc.status_code}


def pretty_print_response(label: str, payload: object) -> None:
    if not isinstance(payload, ResultEnvelope):
        if isinstance(payload, list):
            data = [item.model_dump() for item in payload]
        elif hasattr(payload, "model_dump"):
            data = payload.model_dump()
        else:
            data = payload
        print(json.dumps(data, ensure_ascii=False, indent=2))
        return

    color = GREEN if payload.debug.cache_hit else RED
    cache_label = f"{color}{'cache hit' if payload.debug.cache_hit else 'cache miss'}{RESET}"
    print(
        f"Query: {label} | found: {payload.count} | page {payload.current_page}/{payload.total_pages} "
        f"| skipped: {payload.debug.skipped} | {cache_label}"
    )
    offset = (payload.current_page - 1) * payload.per_page
    for idx, item in enumerate(payload.products, start=offset + 1):
        prices = ", ".join(f"{tier}={amount}" for tier, amount in item.prices.items())
        print(f"  {idx:03d}. {item.id} | {item.sku} | {item.name} | gn={item.gn or '-'} | stock={item.stock} | {prices}")


def interactive_shell(category: int | None) -> None:
    print("Interactive inventory search. Type 'exit' to quit.")
    while True:
        try:
            query = input("> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return
        if not query:
            continue
        if query.lower() in {"exit", "quit"}:
            return
        pretty_print_response(query, run_query({"search": query, "category": category}))


def batch_mode(file_path: Path, category: int | None) -> None:
    with file_path.open("r", encoding="utf-8") as fh:
        for line in fh:
            query = line.strip()
            if not query:
                continue
            pretty_print_response(query, run_query({"search": query, "category": category}))


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="CLI client for the inventory lookup service")
    parser.add_argument("query", nargs="?", help="Search text. If omitted (and no other mode), starts REPL mode.")
    parser.add_argument("--category", type=int, help="Restrict to a category id and its descendants")
    parser.add_argument("--page", type=int, default=1, help="Result page (default 1)")
    parser.add_argument("--id", dest="product_id", type=int, help="Show a single product")
    parser.add_argument("--categories", action="store_true", help="List catalog categories")
    parser.add_argument("--batch", type=Path, help="File with queries to execute line by line")
    parser.add_argument("--load-catalog", action="store_true", help="Rebuild the Elasticsearch indices from the catalog file")
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.load_catalog:
        counts = asyncio.run(reindex_catalog(get_client(settings), settings))
        print(json.dumps(counts))
        return 0
    if args.product_id:
        pretty_print_response(str(args.product_id), run_query({"id": args.product_id}))
        return 0
    if args.categories:
        pretty_print_response("categories", run_query({"action": "categories"}))
        return 0
    if args.batch:
        batch_mode(args.batch, args.category)
        return 0
    if args.query or args.category:
        params = {"search": args.query, "category": args.category, "page": args.page}
        pretty_print_response(args.query or f"category {args.category}", run_query(params))
        return 0
    interactive_shell(args.category)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
