"""Builders for Droip style blocks.

A style block holds raw CSS declarations (no selector) per variant:
"md" is the desktop base, "tablet" applies at <=991px, "mobile" at <=575px,
and state variants such as "md_hover" layer on top.
"""

from collections.abc import Mapping

from .models import StyleBlock


def properties_to_css(properties: Mapping[str, object]) -> str:
    """Convert a property map to a declaration string.

    Order is preserved and the string is always semicolon-terminated, so an
    empty map yields ";".
    """
    return ";".join(f"{prop}:{value}" for prop, value in properties.items()) + ";"


def create(style_id: str, name: str, css: str) -> StyleBlock:
    """Style block with a raw desktop CSS string (e.g. "display:flex;gap:12px;")."""
    return StyleBlock(id=style_id, name=name, variant={"md": css})


def from_properties(style_id: str, name: str, properties: Mapping[str, object]) -> StyleBlock:
    return create(style_id, name, properties_to_css(properties))


def responsive(
    style_id: str,
    name: str,
    desktop: Mapping[str, object],
    tablet: Mapping[str, object] | None = None,
    mobile: Mapping[str, object] | None = None,
) -> StyleBlock:
    """Style block with per-viewport CSS. Empty tablet/mobile maps are left out."""
    variant = {"md": properties_to_css(desktop)}
    if tablet:
        variant["tablet"] = properties_to_css(tablet)
    if mobile:
        variant["mobile"] = properties_to_css(mobile)
    return StyleBlock(id=style_id, name=name, variant=variant)


def with_hover(
    style_id: str,
    name: str,
    normal: Mapping[str, object],
    hover: Mapping[str, object],
) -> StyleBlock:
    return StyleBlock(
        id=style_id,
        name=name,
        variant={"md": properties_to_css(normal), "md_hover": properties_to_css(hover)},
    )
