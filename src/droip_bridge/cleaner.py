"""Normalization pass run on symbol data before validation and saving.

Droip's renderer has quirks that plain referential validation does not catch:

- It checks whether `children` is *set* to decide between rendering an
  element's `contents` and iterating its children. An empty `children` list on
  a text-bearing element therefore hides its text.
- The button renderer ignores `contents` entirely and renders only children,
  so a button without a `text` child shows up blank.
- The root element must have `parentId` null (agents often send "body").

`clean_symbol_data` fixes all three and is idempotent.
"""

import copy
import logging
from typing import Any

from . import elements, ids

logger = logging.getLogger("droip_bridge.cleaner")

# Leaf kinds that render text from their own properties. `button` is not one
# of them: it renders children only.
CONTENT_ELEMENTS = frozenset({
    "heading", "paragraph", "link-text", "text",
    "image", "video", "svg", "svg-icon",
    "input", "textarea", "select",
    "custom-code", "symbol", "pagination-number",
})

DEFAULT_BUTTON_LABEL = "Button"


def _has_text_child(button: dict[str, Any], data: dict[str, Any]) -> bool:
    children = button.get("children")
    if not isinstance(children, list):
        return False
    for child_id in children:
        if not isinstance(child_id, str):
            continue
        child = data.get(child_id)
        if isinstance(child, dict) and child.get("name") == "text":
            return True
    return False


def _button_label(button: dict[str, Any]) -> str:
    props = button.get("properties")
    contents = props.get("contents") if isinstance(props, dict) else None
    if isinstance(contents, list) and contents and isinstance(contents[0], str):
        return contents[0]
    return DEFAULT_BUTTON_LABEL


def _fresh_element_id(data: dict[str, Any]) -> str:
    el_id = ids.element_id()
    while el_id in data:
        el_id = ids.element_id()
    return el_id


def clean_symbol_data(symbol_data: dict[str, Any]) -> dict[str, Any]:
    """Return a cleaned copy of `symbol_data` (the inner symbolData object).

    Malformed parts (non-dict elements, non-list children) are left as they
    are for the validator to report.
    """
    cleaned = copy.deepcopy(symbol_data)
    data = cleaned.get("data")
    if not isinstance(data, dict):
        return cleaned

    root_id = cleaned.get("root")
    buttons_needing_text = []

    for el_id, element in data.items():
        if not isinstance(element, dict):
            continue
        name = element.get("name")
        if not isinstance(name, str):
            name = ""

        if name in CONTENT_ELEMENTS:
            children = element.get("children")
            if isinstance(children, list) and not children:
                del element["children"]
                logger.debug(f"Removed empty children from content element {el_id}")

        if name == "button" and not _has_text_child(element, data):
            buttons_needing_text.append(el_id)

        if el_id == root_id:
            element["parentId"] = None

    for button_id in buttons_needing_text:
        button = data[button_id]
        text_id = _fresh_element_id(data)
        data[text_id] = elements.text(text_id, button_id, _button_label(button)).to_dict()

        if not isinstance(button.get("children"), list):
            button["children"] = []
        button["children"].append(text_id)
        logger.debug(f"Added text child {text_id} to button {button_id}")

    return cleaned
