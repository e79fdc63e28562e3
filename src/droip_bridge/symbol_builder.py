"""Fluent builder for composing complete Droip symbols."""

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from . import elements, ids
from .models import SYMBOL_ROLES, CustomFont, Element, StyleBlock, SymbolData

if TYPE_CHECKING:
    from .persistence import SymbolStore

logger = logging.getLogger("droip_bridge.symbol_builder")

# Root tags that keep the root element a "section"; anything else maps to "div".
SECTION_ROOT_TAGS = frozenset({"header", "footer", "section"})


class SymbolBuilder:
    """Mutable façade over a symbol document.

    The constructor allocates the root element; everything else is added with
    the chainable methods below. Parent/child wiring is explicit: adding an
    element does not attach it to a parent, call `add_child` for that.
    """

    def __init__(self, name: str, category: str = "other"):
        self.name = name
        self.category = category
        self.role = ""
        self._root_id = ids.element_id()
        # Section kind with a div tag until set_root_tag says otherwise
        self._data: dict[str, Element] = {
            self._root_id: elements.section(self._root_id, None, title=name, properties={"tag": "div"}),
        }
        self._style_blocks: dict[str, StyleBlock] = {}
        self._custom_fonts: dict[str, CustomFont] = {}

    @property
    def root_id(self) -> str:
        return self._root_id

    @property
    def root(self) -> Element:
        return self._data[self._root_id]

    def set_as(self, role: str) -> "SymbolBuilder":
        """Set the symbol role ("header", "footer", or "" for none)."""
        if role not in SYMBOL_ROLES:
            raise ValueError(f"Invalid symbol role '{role}'. Valid roles: {', '.join(repr(r) for r in SYMBOL_ROLES)}")
        self.role = role
        return self

    def set_root_tag(self, tag: str) -> "SymbolBuilder":
        """Set the root element's HTML tag."""
        root = self.root
        root.properties["tag"] = tag
        root.name = "section" if tag in SECTION_ROOT_TAGS else "div"
        return self

    def add_element(self, element: Element | dict[str, Any]) -> "SymbolBuilder":
        """Insert or replace an element, keyed by its ID."""
        if not isinstance(element, Element):
            element = Element.model_validate(element)
        self._data[element.id] = element
        return self

    def add_elements(self, new_elements: Iterable[Element | dict[str, Any]]) -> "SymbolBuilder":
        for element in new_elements:
            self.add_element(element)
        return self

    def add_child(self, parent_id: str, child_id: str) -> "SymbolBuilder":
        """Append `child_id` to the parent's children, once. Unknown parents are ignored."""
        parent = self._data.get(parent_id)
        if parent is None:
            logger.debug(f"add_child ignored: parent {parent_id} not in symbol")
            return self
        if parent.children is None:
            parent.children = []
        if child_id not in parent.children:
            parent.children.append(child_id)
        return self

    def add_style_block(self, style_block: StyleBlock) -> "SymbolBuilder":
        self._style_blocks[style_block.id] = style_block
        return self

    def set_root_style_ids(self, style_ids: list[str]) -> "SymbolBuilder":
        self.root.style_ids = list(style_ids)
        return self

    def add_custom_font(self, family: str, font_url: str, variants: Iterable[str] = ()) -> "SymbolBuilder":
        self._custom_fonts[family] = CustomFont(family=family, font_url=font_url, variants=list(variants))
        return self

    def build(self) -> dict[str, Any]:
        """Return the complete `{"symbolData": {...}}` payload without saving."""
        document = SymbolData(
            name=self.name,
            category=self.category,
            root=self._root_id,
            set_as=self.role,
            custom_fonts=self._custom_fonts,
            data=self._data,
            style_blocks=self._style_blocks,
        )
        return {"symbolData": document.to_dict()}

    async def save(self, store: "SymbolStore") -> dict[str, Any] | None:
        """Hand the built payload to the store.

        Returns the store's result (`{"id", "symbolData", "type"}`) or None
        when the store rejected the payload.
        """
        return await store.save(self.build())
