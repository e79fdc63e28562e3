"""Documentation served to the assistant as MCP resources and knowledge tools.

Directory structure:
    guides/
    ├── quick-start.md
    ├── symbol-schema.md
    ├── style-system.md
    ├── animations-interactions.md
    └── element_types.yaml     (element catalogue, rendered to markdown)
"""

from functools import lru_cache
from pathlib import Path

import yaml

DOCS_DIR = Path(__file__).parent / "guides"
ELEMENT_TYPES_FILE = "element_types.yaml"
ELEMENT_TYPES_URI = "droip://docs/element-types"

DOC_RESOURCES: dict[str, dict[str, str]] = {
    "droip://docs/quick-start": {
        "file": "quick-start.md",
        "name": "Droip Quick Start Guide",
        "description": "Step-by-step guide to creating a Droip symbol, with workflow tips and a complete hero section example.",
    },
    "droip://docs/symbol-schema": {
        "file": "symbol-schema.md",
        "name": "Droip Symbol JSON Schema",
        "description": "JSON structure of Droip symbols: top-level fields, element nodes, style blocks, fonts, and validation rules.",
    },
    ELEMENT_TYPES_URI: {
        "file": ELEMENT_TYPES_FILE,
        "name": "Droip Element Types Reference",
        "description": "All Droip element types with their tags, properties, and child rules.",
    },
    "droip://docs/style-system": {
        "file": "style-system.md",
        "name": "Droip Style System",
        "description": "How Droip style blocks work: responsive breakpoints, CSS format, variables, and common layout patterns.",
    },
    "droip://docs/animations-interactions": {
        "file": "animations-interactions.md",
        "name": "Droip Animations, Transitions & Interactions",
        "description": "CSS transitions for hover/focus/active states, transforms, backdrop filters, and Droip's trigger-based interactions.",
    },
}


def read_doc(filename: str) -> str:
    """Read a markdown doc, or explain that it is missing."""
    path = DOCS_DIR / filename
    if not path.exists():
        return f"Documentation file not found: {filename}"
    return path.read_text(encoding="utf-8")


@lru_cache(maxsize=1)
def load_element_types() -> dict[str, dict]:
    """Load the element catalogue, keyed by element kind."""
    with open(DOCS_DIR / ELEMENT_TYPES_FILE) as f:
        data = yaml.safe_load(f) or {}
    return {entry["name"]: entry for entry in data.get("element_types", [])}


def _render_element_type(entry: dict) -> str:
    lines = [
        f"## {entry['name']}",
        f"- Tag: {entry['tag']}",
        f"- Category: {entry['category']}",
    ]
    if entry.get("content_leaf"):
        lines.append("- Content leaf: yes (omit `children` unless it has child elements)")
    else:
        lines.append("- Content leaf: no")
    lines.append(f"- Properties: {', '.join(entry.get('properties', []))}")
    lines.append(f"- Children: {entry['children']}")
    lines.append("")
    lines.append(entry["description"])
    return "\n".join(lines)


def render_element_schema(element_type: str = "") -> str:
    """Render the element catalogue as markdown, optionally for one kind."""
    types = load_element_types()

    if element_type:
        entry = types.get(element_type)
        if entry is None:
            known = ", ".join(sorted(types))
            return f"Unknown element type '{element_type}'. Known types: {known}"
        return f"Filtered for element type: {element_type}\n\n" + _render_element_type(entry)

    sections = ["# Droip Element Types\n"]
    sections.extend(_render_element_type(entry) for entry in types.values())
    return "\n\n".join(sections)


def read_resource(uri: str) -> str:
    """Content for a docs resource URI."""
    meta = DOC_RESOURCES.get(uri)
    if meta is None:
        return f"Resource not found: {uri}"
    if uri == ELEMENT_TYPES_URI:
        return render_element_schema()
    return read_doc(meta["file"])
