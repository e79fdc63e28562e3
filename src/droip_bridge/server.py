"""Droip Bridge - MCP server for building Droip symbols.

Exposes tools to read, create, update, validate, and delete Droip symbols,
inspect pages and site-wide styles, and read the symbol documentation.
Uses FastMCP from the official SDK:
https://github.com/modelcontextprotocol/python-sdk
"""

import asyncio
import json
from typing import Any

from mcp.server.fastmcp import FastMCP

from . import elements, ids
from .bridge_config import BRIDGE_VERSION, BridgeConfigError, BridgeSettings, load_settings
from .cleaner import clean_symbol_data
from .docs import DOC_RESOURCES, read_doc, read_resource, render_element_schema
from .logging_config import configure_logging, get_logger
from .models import SYMBOL_ROLES, ValidationResult
from .persistence import (
    GLOBAL_STYLE_BLOCKS_KEY,
    USER_CONTROLLER_KEY,
    USER_CUSTOM_FONTS_KEY,
    USER_SAVED_DATA_KEY,
    SymbolStore,
)
from .symbol_builder import SECTION_ROOT_TAGS
from .validator import validate

# Logs go to file only: stdout carries the MCP stdio stream
configure_logging(console_output=False)
logger = get_logger("server")

mcp = FastMCP("droip-bridge")

# Global state (initialized on first tool call)
_store: SymbolStore | None = None
_settings: BridgeSettings | None = None
_initialized = False
_init_lock = asyncio.Lock()


async def _ensure_initialized() -> tuple[SymbolStore, BridgeSettings]:
    """Lazy initialization of settings and store."""
    global _store, _settings, _initialized

    if _initialized:
        return _store, _settings

    async with _init_lock:
        if _initialized:
            return _store, _settings

        logger.info("Initializing Droip Bridge server...")
        try:
            _settings = load_settings()
            _store = SymbolStore(db_path=_settings.db_path)
            _initialized = True
            logger.info(f"Server initialized (db={_settings.db_path})")
        except Exception as e:
            logger.error(f"Failed to initialize Droip Bridge server: {e}")
            raise

        return _store, _settings


def _to_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def _validate_role(role: str) -> str | None:
    """Validate a setAs role. Returns error message or None if valid."""
    if role not in SYMBOL_ROLES:
        return f'Error: Invalid setAs \'{role}\'. Valid roles: "", "header", "footer"'
    return None


def _validation_failure(result: ValidationResult, include_warnings: bool = True) -> str:
    lines = ["Validation failed:"]
    lines.extend(f"- ERROR: {e}" for e in result.errors)
    if include_warnings:
        lines.extend(f"- WARNING: {w}" for w in result.warnings)
    return "\n".join(lines)


def _find_root(data: dict[str, Any]) -> str | None:
    """First element without a parent."""
    for el_id, element in data.items():
        if isinstance(element, dict) and element.get("parentId") is None:
            return el_id
    return None


def _apply_root_tag(symbol_data: dict[str, Any], tag: str) -> None:
    root = symbol_data["data"].get(symbol_data["root"])
    if not isinstance(root, dict):
        return
    if not isinstance(root.get("properties"), dict):
        root["properties"] = {}
    root["properties"]["tag"] = tag
    root["name"] = "section" if tag in SECTION_ROOT_TAGS else "div"


def _fresh_element_id(existing: dict[str, Any]) -> str:
    el_id = ids.element_id()
    while el_id in existing:
        el_id = ids.element_id()
    return el_id


# ============================================================================
# KNOWLEDGE TOOLS
# ============================================================================


@mcp.tool()
async def droip_get_element_schema(element_type: str = "") -> str:
    """Get the schema of Droip element types with their properties, tags, and child rules.

    Args:
        element_type: Optional filter for one element type (e.g. "heading", "button", "image")
    """
    return render_element_schema(element_type)


@mcp.tool()
async def droip_get_symbol_guide() -> str:
    """Get a step-by-step guide on building Droip symbols.

    Covers the full JSON structure, best practices, and workflow.
    Read this before creating your first symbol.
    """
    return read_doc("quick-start.md") + "\n\n---\n\n" + read_doc("symbol-schema.md")


@mcp.tool()
async def droip_get_style_guide() -> str:
    """Get documentation on Droip's CSS style system: style blocks, breakpoints, CSS format, variables."""
    return read_doc("style-system.md")


@mcp.tool()
async def droip_get_animation_guide() -> str:
    """Get documentation on Droip's transitions, hover/focus states, transforms, and interactions."""
    return read_doc("animations-interactions.md")


@mcp.tool()
async def droip_get_example_symbols(type: str = "") -> str:
    """Get real example symbol JSON structures from the current site.

    Args:
        type: Optional filter matched against category, name, and role
              (e.g. "header", "hero", "card", "footer", "button")
    """
    store, settings = await _ensure_initialized()

    symbols = await store.list_symbols()
    if not symbols:
        return "No symbols found on this site. Use droip_get_symbol_guide to learn how to create one."

    filtered = symbols
    if type:
        needle = type.lower()
        filtered = [
            s for s in symbols
            if needle in str(s["symbolData"].get("category", "")).lower()
            or needle in str(s["symbolData"].get("name", "")).lower()
            or needle in str(s["symbolData"].get("setAs", "")).lower()
        ]

    if not filtered:
        available = ", ".join(s["symbolData"].get("name", "Unnamed") for s in symbols)
        return f"No symbols matching type '{type}' found. Available symbols: {available}"

    lines = ["## Example Symbols from Current Site\n"]
    for symbol in filtered[:settings.example_limit]:
        data = symbol["symbolData"]
        lines.append(f"### {data.get('name', 'Unnamed')} (ID: {symbol['id']})")
        lines.append(f"- Category: {data.get('category', 'other')}")
        lines.append(f"- Root: {data.get('root')}")
        lines.append(f"- Elements: {len(data.get('data') or {})}")
        lines.append(f"- Style blocks: {len(data.get('styleBlocks') or {})}")
        lines.append(f"\n```json\n{_to_json(data)}\n```\n")

    return "\n".join(lines)


# ============================================================================
# SYMBOL CRUD TOOLS
# ============================================================================


@mcp.tool()
async def droip_create_symbol(
    name: str,
    data: dict[str, Any],
    styleBlocks: dict[str, Any] | None = None,
    category: str = "other",
    setAs: str = "",
    rootTag: str = "",
    customFonts: dict[str, Any] | None = None,
) -> str:
    """Create a new Droip symbol.

    The symbol is cleaned (empty children on text elements removed, button
    labels added) and validated before saving. Use droip_get_symbol_guide to
    learn the expected structure.

    Args:
        name: Symbol display name
        data: Flat element map keyed by element ID; exactly one element has parentId null
        styleBlocks: Style blocks map keyed by style block ID
        category: Category (e.g. "Sections", "Buttons"). Default "other"
        setAs: Symbol role: "" (default), "header", or "footer"
        rootTag: Optional HTML tag for the root element (e.g. "header", "nav")
        customFonts: Optional custom font definitions used by this symbol
    """
    store, settings = await _ensure_initialized()

    if not name:
        return 'Error: "name" is required'
    if not data:
        return 'Error: "data" (element map) is required'
    if error := _validate_role(setAs):
        return error

    root_id = _find_root(data)
    if root_id is None:
        return "Error: No root element found (an element with parentId = null)"

    symbol_data = {
        "name": name,
        "category": category or "other",
        "root": root_id,
        "setAs": setAs,
        "customFonts": customFonts or {},
        "data": data,
        "styleBlocks": styleBlocks or {},
    }

    symbol_data = clean_symbol_data(symbol_data)
    if rootTag:
        _apply_root_tag(symbol_data, rootTag)

    result = validate(symbol_data)
    if not result.valid:
        logger.info(f"Rejected symbol '{name}': {len(result.errors)} validation errors")
        return _validation_failure(result)

    saved = await store.save({"symbolData": symbol_data})
    if saved is None:
        return "Error: Failed to save symbol to database"

    if setAs:
        await store.claim_role(saved["id"], setAs)

    message = f"Symbol '{name}' created successfully with ID {saved['id']}."
    if result.warnings:
        message += "\nWarnings:\n" + "\n".join(f"- {w}" for w in result.warnings)

    return _to_json({
        "success": True,
        "id": saved["id"],
        "name": name,
        "category": symbol_data["category"],
        "message": message,
    })


@mcp.tool()
async def droip_list_symbols(include_data: bool = False) -> str:
    """List all Droip symbols on the site with their IDs, names, categories, and roles.

    Args:
        include_data: Include full element data and style blocks (default false)
    """
    store, settings = await _ensure_initialized()

    symbols = await store.list_symbols()
    if not symbols:
        return "No symbols found."

    output = []
    for symbol in symbols:
        data = symbol["symbolData"]
        entry = {
            "id": symbol["id"],
            "name": data.get("name", "Unnamed"),
            "category": data.get("category", "other"),
            "setAs": data.get("setAs", ""),
        }
        if include_data:
            entry["data"] = data.get("data", {})
            entry["styleBlocks"] = data.get("styleBlocks", {})
        output.append(entry)

    return _to_json(output)


@mcp.tool()
async def droip_get_symbol(symbol_id: int) -> str:
    """Get the full data of a Droip symbol, including all elements and style blocks.

    Args:
        symbol_id: ID of the symbol
    """
    store, settings = await _ensure_initialized()

    if symbol_id <= 0:
        return 'Error: "symbol_id" is required and must be a positive integer'

    symbol = await store.get_symbol(symbol_id)
    if symbol is None:
        return f"Error: Symbol with ID {symbol_id} not found"

    return _to_json(symbol)


@mcp.tool()
async def droip_update_symbol(
    symbol_id: int,
    name: str | None = None,
    category: str | None = None,
    setAs: str | None = None,
    data: dict[str, Any] | None = None,
    styleBlocks: dict[str, Any] | None = None,
) -> str:
    """Update an existing Droip symbol. Only provided fields are updated.

    Setting setAs to "header" or "footer" clears that role from any other symbol.

    Args:
        symbol_id: ID of the symbol to update
        name: New display name
        category: New category
        setAs: New role: "", "header", or "footer"
        data: New element data map (replaces the entire map)
        styleBlocks: New style blocks (replace all style blocks)
    """
    store, settings = await _ensure_initialized()

    if symbol_id <= 0:
        return 'Error: "symbol_id" is required and must be a positive integer'

    existing = await store.get_symbol(symbol_id)
    if existing is None:
        return f"Error: Symbol with ID {symbol_id} not found"

    if setAs is not None and (error := _validate_role(setAs)):
        return error

    symbol_data = existing["symbolData"]
    updated = False
    for field, value in (("name", name), ("category", category), ("setAs", setAs)):
        if value is not None:
            symbol_data[field] = value
            updated = True
    if data is not None:
        symbol_data["data"] = data
        # Follow the new tree's root if the old one was dropped
        if symbol_data.get("root") not in data:
            symbol_data["root"] = _find_root(data) or symbol_data.get("root")
        updated = True
    if styleBlocks is not None:
        symbol_data["styleBlocks"] = styleBlocks
        updated = True

    if not updated:
        return "No updates provided."

    if data is not None:
        symbol_data = clean_symbol_data(symbol_data)

    if data is not None or styleBlocks is not None:
        result = validate(symbol_data)
        if not result.valid:
            logger.info(f"Rejected update of symbol {symbol_id}: {len(result.errors)} validation errors")
            return _validation_failure(result, include_warnings=False)

    if setAs:
        await store.claim_role(symbol_id, setAs)

    success = await store.update_symbol(symbol_id, symbol_data)

    return _to_json({
        "success": success,
        "id": symbol_id,
        "message": f"Symbol {symbol_id} updated successfully." if success else f"Failed to update symbol {symbol_id}.",
    })


@mcp.tool()
async def droip_delete_symbol(symbol_id: int) -> str:
    """Delete a Droip symbol permanently.

    Args:
        symbol_id: ID of the symbol to delete
    """
    store, settings = await _ensure_initialized()

    if symbol_id <= 0:
        return 'Error: "symbol_id" is required and must be a positive integer'

    if await store.get_symbol(symbol_id) is None:
        return f"Error: Symbol with ID {symbol_id} not found"

    deleted = await store.delete_symbol(symbol_id)
    return _to_json({
        "success": deleted,
        "message": f"Symbol {symbol_id} deleted." if deleted else f"Failed to delete symbol {symbol_id}.",
    })


# ============================================================================
# BUILDER TOOLS
# ============================================================================


@mcp.tool()
async def droip_validate_symbol(symbol_data: dict[str, Any]) -> str:
    """Validate a Droip symbol data structure without saving. Returns errors and warnings.

    Args:
        symbol_data: The inner symbolData object (name, root, data, styleBlocks)
    """
    if not symbol_data:
        return 'Error: "symbol_data" is required'

    return _to_json(validate(symbol_data).model_dump())


@mcp.tool()
async def droip_generate_ids(count: int = 1, type: str = "element") -> str:
    """Generate Droip-compatible IDs for elements or style blocks.

    Args:
        count: Number of IDs to generate (default 1, max 100)
        type: "element" or "style" (default "element")
    """
    store, settings = await _ensure_initialized()

    count = max(1, count)
    if count > settings.max_ids_per_request:
        return f"Error: Maximum {settings.max_ids_per_request} IDs per request"

    if type == "style":
        generated = ids.style_batch(count, prefix=settings.style_prefix)
    else:
        generated = ids.element_batch(count)

    return _to_json({"ids": generated, "type": type})


@mcp.tool()
async def droip_add_symbol_to_page(
    page_id: int,
    symbol_id: int,
    parent_element_id: str,
    position: int | None = None,
) -> str:
    """Add a symbol instance to a page's element tree.

    Args:
        page_id: ID of the page
        symbol_id: ID of the symbol to add
        parent_element_id: Element in the page tree that will contain the instance
        position: Index in the parent's children (default: append at end)
    """
    store, settings = await _ensure_initialized()

    if page_id <= 0 or symbol_id <= 0 or not parent_element_id:
        return "Error: page_id, symbol_id, and parent_element_id are required"

    page = await store.get_page(page_id)
    if page is None:
        return f"Error: Page with ID {page_id} not found"

    if await store.get_symbol(symbol_id) is None:
        return f"Error: Symbol with ID {symbol_id} not found"

    blocks = page["blocks"]
    if not blocks:
        return f"Error: Page {page_id} has no Droip data"

    parent = blocks.get(parent_element_id)
    if not isinstance(parent, dict):
        return f"Error: Parent element '{parent_element_id}' not found in page data"

    instance_id = _fresh_element_id(blocks)
    blocks[instance_id] = elements.symbol_instance(instance_id, parent_element_id, symbol_id).to_dict()

    if not isinstance(parent.get("children"), list):
        parent["children"] = []
    if position is not None and position >= 0:
        parent["children"].insert(position, instance_id)
    else:
        parent["children"].append(instance_id)

    await store.update_page_blocks(page_id, blocks)
    logger.info(f"Added symbol {symbol_id} to page {page_id} as {instance_id}")

    return _to_json({
        "success": True,
        "element_id": instance_id,
        "message": f"Symbol {symbol_id} added to page {page_id} as element '{instance_id}'.",
    })


# ============================================================================
# PAGE DATA TOOLS
# ============================================================================


@mcp.tool()
async def droip_list_pages(post_type: str = "page") -> str:
    """List pages/posts with their ID, title, slug, status, and whether they have Droip data.

    Args:
        post_type: Post type to list (default "page")
    """
    store, settings = await _ensure_initialized()

    pages = await store.list_pages(post_type)
    output = [
        {
            "id": page["id"],
            "title": page["title"],
            "slug": page["slug"],
            "status": page["status"],
            "has_droip_data": bool(page["blocks"]),
            "editor_mode": page["editor_mode"] or "none",
        }
        for page in pages
    ]
    return _to_json(output)


@mcp.tool()
async def droip_get_page_data(page_id: int) -> str:
    """Get the Droip element tree and style blocks for a page.

    Args:
        page_id: ID of the page
    """
    store, settings = await _ensure_initialized()

    if page_id <= 0:
        return 'Error: "page_id" is required'

    page = await store.get_page(page_id)
    if page is None:
        return f"Error: Post with ID {page_id} not found"

    if not page["blocks"]:
        return _to_json({
            "page_id": page_id,
            "title": page["title"],
            "has_data": False,
            "message": "This page has no Droip data.",
        })

    return _to_json({
        "page_id": page_id,
        "title": page["title"],
        "blocks": page["blocks"],
        "styleBlocks": page["style_blocks"] or {},
    })


@mcp.tool()
async def droip_get_global_styles() -> str:
    """Get all global style blocks shared across the site."""
    store, settings = await _ensure_initialized()

    global_styles = await store.get_global(GLOBAL_STYLE_BLOCKS_KEY)
    if not global_styles:
        return "No global style blocks found."

    return _to_json(global_styles)


@mcp.tool()
async def droip_get_variables() -> str:
    """Get design system variables (colors, spacing, typography tokens), custom fonts, and viewports."""
    store, settings = await _ensure_initialized()

    output: dict[str, Any] = {"user_saved_data": await store.get_global(USER_SAVED_DATA_KEY) or []}

    custom_fonts = await store.get_global(USER_CUSTOM_FONTS_KEY)
    if custom_fonts:
        output["custom_fonts"] = custom_fonts

    viewports = await store.get_global(USER_CONTROLLER_KEY)
    if viewports:
        output["viewports"] = viewports

    return _to_json(output)


# ============================================================================
# RESOURCES
# ============================================================================


def _register_doc_resource(uri: str, meta: dict[str, str]) -> None:
    async def read() -> str:
        return read_resource(uri)

    mcp.resource(uri, name=meta["name"], description=meta["description"], mime_type="text/markdown")(read)


for _uri, _meta in DOC_RESOURCES.items():
    _register_doc_resource(_uri, _meta)


# ============================================================================
# ENTRY POINT
# ============================================================================


def main():
    """Run the MCP server with stdio transport."""
    import sys

    if len(sys.argv) > 1:
        if sys.argv[1] in ("--help", "-h"):
            print("""Droip Bridge - MCP server for Droip symbols

Usage: droip-bridge [OPTIONS]

Runs as an MCP server over stdio. Launch it from an MCP client such as
Claude Code via .mcp.json (see `droip-bridge-config mcp-json`).

Options:
  -h, --help     Show this help message
  -V, --version  Show version number

Other commands:
  droip-bridge-config    Show settings, enable/disable the server, print MCP config
  droip-bridge-export    Export symbols to JSON
  droip-bridge-import    Import symbols from JSON

Data is stored in ~/.droip-bridge/ by default (override with DROIP_BRIDGE_DATA_DIR).
""")
            return
        elif sys.argv[1] in ("--version", "-V"):
            print(f"droip-bridge {BRIDGE_VERSION}")
            return

    try:
        settings = load_settings()
    except BridgeConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    if not settings.enabled:
        print("MCP server is disabled. Enable it with `droip-bridge-config enable`.", file=sys.stderr)
        sys.exit(1)

    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
