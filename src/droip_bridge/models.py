"""Data models for Droip symbols.

Field names on the wire are Droip's own (camelCase); the models expose them
as snake_case attributes with aliases, and every model serializes back to the
wire shape through `to_dict()`.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# Document-level role. At most one stored symbol may hold each non-empty role;
# the store enforces that at write time (see SymbolStore.claim_role).
SymbolRole = Literal["", "header", "footer"]
SYMBOL_ROLES: tuple[str, ...] = ("", "header", "footer")

STYLE_PANELS = (
    "typography",
    "composition",
    "size",
    "background",
    "stroke",
    "shadow",
    "effects",
    "position",
    "transform",
    "interaction",
    "animation",
)


def default_style_panels() -> dict[str, bool]:
    return {panel: True for panel in STYLE_PANELS}


class Element(BaseModel):
    """A node in a symbol's flat element map.

    `children` is tri-state and maps onto the wire like this:
      None          -> key omitted (content leaf; renderer shows `contents`)
      []            -> key present, empty container
      ["dp..", ...] -> key present with child IDs, in order
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    visibility: bool = True
    collapse: bool = False
    name: str
    title: str = ""
    properties: dict[str, Any] = Field(default_factory=dict)
    style_ids: list[str] = Field(default_factory=list, alias="styleIds")
    class_name: str = Field(default="", alias="className")
    source: str = "droip"
    id: str
    parent_id: str | None = Field(None, alias="parentId")
    style_panels: dict[str, bool] = Field(default_factory=default_style_panels, alias="stylePanels")
    children: list[str] | None = None
    hide: Any = None
    template_mounted: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire shape Droip's renderer reads."""
        data = self.model_dump(by_alias=True, exclude={"children", "hide", "template_mounted"})
        if self.children is not None:
            data["children"] = list(self.children)
        if self.hide is not None:
            data["hide"] = self.hide
        if self.template_mounted:
            data["template_mounted"] = True
        return data


class ElementOptions(BaseModel):
    """Overridable base fields accepted by every element constructor."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    visibility: bool = True
    class_name: str = Field(default="", alias="className")
    style_ids: list[str] = Field(default_factory=list, alias="styleIds")
    title: str | None = None
    hide: Any = None
    children: list[str] = Field(default_factory=list)
    symbol_el_prop_id: str | None = Field(None, alias="symbolElPropId")
    properties: dict[str, Any] = Field(default_factory=dict)


class StyleBlock(BaseModel):
    """A named set of CSS declarations per responsive/state variant."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    type: Literal["class"] = "class"
    name: str
    variant: dict[str, str] = Field(..., description="Variant key ('md', 'tablet', 'md_hover', ...) to CSS string")
    is_global: bool = Field(default=True, alias="isGlobal")
    is_symbol_style: bool = Field(default=True, alias="isSymbolStyle")

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class CustomFont(BaseModel):
    """A font family a symbol loads from an external URL."""

    model_config = ConfigDict(populate_by_name=True)

    font_url: str = Field(..., alias="fontUrl")
    family: str
    variants: list[str] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class SymbolData(BaseModel):
    """The aggregate symbol document."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    category: str = "other"
    root: str
    set_as: SymbolRole = Field(default="", alias="setAs")
    custom_fonts: dict[str, CustomFont] = Field(default_factory=dict, alias="customFonts")
    data: dict[str, Element] = Field(default_factory=dict)
    style_blocks: dict[str, StyleBlock] = Field(default_factory=dict, alias="styleBlocks")

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "category": self.category,
            "root": self.root,
            "setAs": self.set_as,
            "customFonts": {family: font.to_dict() for family, font in self.custom_fonts.items()},
            "data": {el_id: el.to_dict() for el_id, el in self.data.items()},
            "styleBlocks": {sb_id: sb.to_dict() for sb_id, sb in self.style_blocks.items()},
        }


class ValidationResult(BaseModel):
    """Outcome of validating a symbol document."""

    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
