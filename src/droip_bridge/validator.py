"""Structural validation of Droip symbol data before saving.

Checks required fields, parent/child references, child-reference cycles,
style block references, and element kinds. Problems that make a symbol unsafe
to persist are errors; advisory findings (unknown kinds, orphans, dangling
style references) are warnings. Nothing here raises for malformed input.
"""

from typing import Any

import networkx as nx

from .elements import FACTORY_KINDS
from .models import ValidationResult

REQUIRED_SYMBOL_FIELDS = ("name", "root", "data", "styleBlocks")
REQUIRED_ELEMENT_FIELDS = ("name", "properties", "id")

# Kinds Droip's renderer ships with. Anything else is tolerated with a
# warning, since sites may register custom elements.
DROIP_ELEMENT_NAMES = frozenset({
    "div", "section", "heading", "paragraph", "button", "link-block",
    "link-text", "image", "video", "svg", "svg-icon", "form", "input",
    "textarea", "select", "radio-button", "radio-group", "checkbox-element",
    "custom-code", "symbol", "collection", "slider", "slider_mask",
    "items", "loading", "map", "file-upload", "file-upload-inner",
    "file-upload-threshold-text",
})
KNOWN_ELEMENT_NAMES = DROIP_ELEMENT_NAMES | FACTORY_KINDS


def _child_cycles(data: dict[str, Any]) -> list[list[str]]:
    """Find cycles formed by `children` references between existing elements."""
    graph = nx.DiGraph()
    for el_id, element in data.items():
        if not isinstance(element, dict) or not isinstance(element.get("children"), list):
            continue
        for child_id in element["children"]:
            if isinstance(child_id, str) and child_id in data:
                graph.add_edge(el_id, child_id)

    cycles = []
    for component in nx.strongly_connected_components(graph):
        subgraph = graph.subgraph(component)
        if subgraph.number_of_edges() == 0:
            continue
        edges = nx.find_cycle(subgraph)
        cycles.append([edges[0][0]] + [target for _, target in edges])
    return sorted(cycles)


def validate(symbol_data: dict[str, Any]) -> ValidationResult:
    """Validate a symbol data structure (the inner `symbolData` object)."""
    errors: list[str] = []
    warnings: list[str] = []

    if not isinstance(symbol_data, dict):
        return ValidationResult(valid=False, errors=["Symbol data must be an object"])

    for field in REQUIRED_SYMBOL_FIELDS:
        value = symbol_data.get(field)
        if value is None or (field == "name" and value == ""):
            errors.append(f"Missing required field: '{field}'")

    # Nothing further can be inspected safely on a partial document
    if errors:
        return ValidationResult(valid=False, errors=errors, warnings=warnings)

    root = symbol_data["root"]
    data = symbol_data["data"]
    style_blocks = symbol_data["styleBlocks"]

    for field, value in (("data", data), ("styleBlocks", style_blocks)):
        if not isinstance(value, dict):
            errors.append(f"Field '{field}' must be an object keyed by ID")
    if errors:
        return ValidationResult(valid=False, errors=errors, warnings=warnings)

    root_element = data.get(root) if isinstance(root, str) else None
    if root_element is None:
        errors.append(f"Root element '{root}' not found in data map")
    elif isinstance(root_element, dict) and root_element.get("parentId") is not None:
        warnings.append("Root element should have parentId = null")

    referenced_as_child: set[str] = set()

    for el_id, element in data.items():
        if not isinstance(element, dict):
            errors.append(f"Element '{el_id}' must be an object")
            continue

        for field in REQUIRED_ELEMENT_FIELDS:
            if element.get(field) is None:
                errors.append(f"Element '{el_id}' missing required field: '{field}'")

        own_id = element.get("id")
        if own_id is not None and own_id != el_id:
            errors.append(f"Element key '{el_id}' does not match element id '{own_id}'")

        name = element.get("name")
        if name is not None and (not isinstance(name, str) or name not in KNOWN_ELEMENT_NAMES):
            warnings.append(f"Element '{el_id}' has unknown type '{name}' (this may be a custom element)")

        parent_id = element.get("parentId")
        if parent_id is not None and (not isinstance(parent_id, str) or parent_id not in data):
            errors.append(f"Element '{el_id}' references non-existent parent '{parent_id}'")

        children = element.get("children")
        if isinstance(children, list):
            for child_id in children:
                if not isinstance(child_id, str) or child_id not in data:
                    errors.append(f"Element '{el_id}' references non-existent child '{child_id}'")
                if isinstance(child_id, str):
                    referenced_as_child.add(child_id)

        style_ids = element.get("styleIds")
        if isinstance(style_ids, list):
            for style_id in style_ids:
                if not isinstance(style_id, str) or style_id not in style_blocks:
                    warnings.append(f"Element '{el_id}' references non-existent style block '{style_id}'")

    for el_id in data:
        if el_id != root and el_id not in referenced_as_child:
            warnings.append(f"Element '{el_id}' is orphaned (not referenced as a child of any element)")

    for cycle in _child_cycles(data):
        errors.append(f"Child references form a cycle: {' -> '.join(cycle)}")

    for sb_id, style_block in style_blocks.items():
        if not isinstance(style_block, dict):
            errors.append(f"Style block '{sb_id}' must be an object")
            continue
        if style_block.get("id") is None:
            errors.append(f"Style block '{sb_id}' missing 'id' field")
        variant = style_block.get("variant")
        if not isinstance(variant, dict):
            errors.append(f"Style block '{sb_id}' missing or invalid 'variant' field")
        elif "md" in variant and variant["md"] is not None and not isinstance(variant["md"], str):
            errors.append(f"Style block '{sb_id}' variant 'md' must be a CSS string")

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)
