"""Data operations for Droip Bridge - symbol export and import."""

import asyncio
import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path

from .bridge_config import BRIDGE_VERSION, BridgeConfigError, load_settings
from .cleaner import clean_symbol_data
from .models import SYMBOL_ROLES
from .persistence import SymbolStore
from .validator import validate

logger = logging.getLogger("droip_bridge.data_ops")

MERGE_STRATEGIES = ("skip", "duplicate")


async def export_symbols(store: SymbolStore, output_path: Path | None = None) -> dict:
    """
    Export all symbols to JSON format.

    Args:
        store: Symbol store to read from
        output_path: Path to write JSON file (None for stdout)

    Returns:
        Dict with export results
    """
    symbols = await store.list_symbols()

    export_data = {
        "bridge_version": BRIDGE_VERSION,
        "export_date": datetime.now(UTC).isoformat(),
        "symbol_count": len(symbols),
        "symbols": [{"id": s["id"], "symbolData": s["symbolData"]} for s in symbols],
    }

    if output_path:
        output_path.write_text(json.dumps(export_data, indent=2, ensure_ascii=False))
        return {"status": "success", "path": str(output_path), "count": len(symbols)}
    else:
        print(json.dumps(export_data, indent=2, ensure_ascii=False))
        return {"status": "success", "count": len(symbols)}


async def import_symbols(
    store: SymbolStore,
    input_path: Path,
    merge_strategy: str = "skip",  # skip, duplicate
    dry_run: bool = False,
) -> dict:
    """
    Import symbols from an export file.

    Every symbol is cleaned and validated before it is saved. Symbols whose
    name already exists are skipped unless merge_strategy is "duplicate".
    A header/footer role already held by another symbol is not taken over.

    Args:
        store: Symbol store to write to
        input_path: Path to JSON file
        merge_strategy: How to handle duplicate names (skip, duplicate)
        dry_run: If True, don't actually import

    Returns:
        Dict with import results
    """
    if merge_strategy not in MERGE_STRATEGIES:
        raise ValueError(f"Unknown merge strategy '{merge_strategy}'. Valid: {', '.join(MERGE_STRATEGIES)}")

    results = {
        "total": 0,
        "imported": 0,
        "skipped": 0,
        "roles_cleared": 0,
        "errors": [],
        "dry_run": dry_run,
    }

    try:
        data = json.loads(input_path.read_text())
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse JSON file {input_path}: {e}")
        results["errors"].append(f"Invalid JSON file: {e}")
        return results

    entries = data.get("symbols", []) if isinstance(data, dict) else []
    results["total"] = len(entries)

    existing = await store.list_symbols()
    existing_names = {str(s["symbolData"].get("name", "")).lower() for s in existing}
    # Roles taken by earlier entries of this file (not yet stored on a dry run)
    claimed_roles: set[str] = set()

    for index, entry in enumerate(entries):
        symbol_data = entry.get("symbolData") if isinstance(entry, dict) else None
        if not isinstance(symbol_data, dict):
            results["errors"].append(f"Symbol #{index}: missing symbolData object")
            continue

        name = str(symbol_data.get("name", ""))
        label = name or f"#{index}"

        if name.lower() in existing_names and merge_strategy == "skip":
            results["skipped"] += 1
            continue

        symbol_data = clean_symbol_data(symbol_data)
        result = validate(symbol_data)
        if not result.valid:
            results["errors"].append(f"Symbol {label}: {'; '.join(result.errors)}")
            continue

        role = symbol_data.get("setAs") or ""
        if role and (role not in SYMBOL_ROLES or role in claimed_roles or await store.role_holder(role) is not None):
            symbol_data["setAs"] = ""
            results["roles_cleared"] += 1
        elif role:
            claimed_roles.add(role)

        if not dry_run:
            saved = await store.save({"symbolData": symbol_data})
            if saved is None:
                results["errors"].append(f"Symbol {label}: failed to save")
                continue

        existing_names.add(name.lower())
        results["imported"] += 1

    logger.info(
        f"Import from {input_path}: {results['imported']} imported, "
        f"{results['skipped']} skipped, {len(results['errors'])} errors"
    )
    return results


def _open_store(data_dir: str | None) -> SymbolStore:
    try:
        settings = load_settings(data_dir)
    except BridgeConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    return SymbolStore(db_path=settings.db_path)


def main_export():
    """CLI entry point for droip-bridge-export."""
    import argparse

    parser = argparse.ArgumentParser(description="Export Droip Bridge symbols")
    parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Output file path (default: stdout)"
    )
    parser.add_argument("--data-dir", help="Data directory (default: $DROIP_BRIDGE_DATA_DIR or ~/.droip-bridge)")

    args = parser.parse_args()
    store = _open_store(args.data_dir)

    async def run():
        try:
            result = await export_symbols(store, args.output)
        finally:
            await store.close_pool()
        if args.output:
            print(f"Exported {result['count']} symbols to {result['path']}")

    asyncio.run(run())


def main_import():
    """CLI entry point for droip-bridge-import."""
    import argparse

    parser = argparse.ArgumentParser(description="Import Droip Bridge symbols")
    parser.add_argument(
        "file",
        type=Path,
        help="JSON file to import"
    )
    parser.add_argument(
        "--merge",
        choices=MERGE_STRATEGIES,
        default="skip",
        help="How to handle symbols whose name already exists (default: skip)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be imported without making changes"
    )
    parser.add_argument("--data-dir", help="Data directory (default: $DROIP_BRIDGE_DATA_DIR or ~/.droip-bridge)")

    args = parser.parse_args()

    if not args.file.exists():
        print(f"Error: File not found: {args.file}")
        sys.exit(1)

    store = _open_store(args.data_dir)

    async def run():
        try:
            result = await import_symbols(store, args.file, args.merge, args.dry_run)
        finally:
            await store.close_pool()

        print(f"\nImport {'(dry run) ' if result['dry_run'] else ''}results:")
        print(f"  Total in file: {result['total']}")
        print(f"  Imported: {result['imported']}")
        print(f"  Skipped (duplicate name): {result['skipped']}")
        print(f"  Roles cleared: {result['roles_cleared']}")

        if result['errors']:
            print("\n  Errors:")
            for e in result['errors']:
                print(f"    - {e}")

    asyncio.run(run())
