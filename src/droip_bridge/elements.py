"""Constructors for well-formed Droip element nodes.

Every element in a symbol's data map shares the same base structure; the
functions here fill it in per element kind so that callers only supply the
content that differs. The set of kinds is closed: there is no generic
"make any kind" constructor, and unknown option keys raise.

Base options (keyword arguments accepted by every constructor):
    visibility, class_name, style_ids, title, hide, children,
    symbol_el_prop_id, properties (merged over the kind's own properties)
"""

import copy
from typing import Any

from . import ids
from .models import Element, ElementOptions

# Kinds this module can produce.
FACTORY_KINDS = frozenset({
    "div", "section", "text", "heading", "paragraph", "link-text", "button",
    "link-block", "image", "video", "svg", "svg-icon", "form", "input",
    "textarea", "select", "custom-code", "symbol", "collection", "items",
    "item", "pagination", "pagination-item", "pagination-number", "empty",
})

COLLECTION_DEFAULTS: dict[str, Any] = {
    "collectionType": "post",
    "items": "6",
    "pagination": True,
    "filters": [],
    "sorting": {"orderby": "date", "order": "DESC"},
    "offset": "0",
    "taxonomy": {},
    "inherit": False,
}


def _default_title(name: str) -> str:
    title = name.replace("-", " ")
    return title[:1].upper() + title[1:]


def _base_element(
    el_id: str,
    name: str,
    parent_id: str | None,
    properties: dict[str, Any],
    opts: dict[str, Any],
    *,
    template_mounted: bool = False,
) -> Element:
    """Build the structure every Droip element shares."""
    options = ElementOptions(**opts)

    props = dict(properties)
    props["symbolElPropId"] = options.symbol_el_prop_id or ids.symbol_el_prop_id()
    props.update(options.properties)

    # Droip's renderer checks whether `children` is set to decide between
    # rendering `contents` and iterating children, so an empty list is
    # never emitted here.
    children = list(options.children) or None

    return Element(
        visibility=options.visibility,
        name=name,
        title=options.title if options.title is not None else _default_title(name),
        properties=props,
        style_ids=list(options.style_ids),
        class_name=options.class_name,
        id=el_id,
        parent_id=parent_id,
        children=children,
        hide=options.hide,
        template_mounted=template_mounted,
    )


# ── Containers ──────────────────────────────────────────────────────────


def frame(el_id: str, parent_id: str | None, tag: str = "div", **opts) -> Element:
    """Generic div container."""
    return _base_element(el_id, "div", parent_id, {"tag": tag}, opts)


def section(el_id: str, parent_id: str | None, title: str = "Section", **opts) -> Element:
    """Semantic <section> container."""
    return _base_element(el_id, "section", parent_id, {"tag": "section"}, {**opts, "title": title})


# ── Text ────────────────────────────────────────────────────────────────


def text(el_id: str, parent_id: str | None, content: str, tag: str = "span", **opts) -> Element:
    """Inline text leaf, used as the label inside buttons."""
    return _base_element(el_id, "text", parent_id, {"tag": tag, "contents": [content]}, opts)


def heading(el_id: str, parent_id: str | None, content: str, tag: str = "h2", **opts) -> Element:
    return _base_element(el_id, "heading", parent_id, {"tag": tag, "contents": [content]}, opts)


def paragraph(el_id: str, parent_id: str | None, content: str, **opts) -> Element:
    return _base_element(el_id, "paragraph", parent_id, {"tag": "p", "contents": [content]}, opts)


def link_text(
    el_id: str, parent_id: str | None, content: str, href: str, target: str = "", **opts
) -> Element:
    return _base_element(el_id, "link-text", parent_id, {
        "tag": "a",
        "contents": [content],
        "type": "href",
        "isActive": False,
        "preload": "default",
        "attributes": {"href": href, "target": target},
    }, opts)


# ── Interactive ─────────────────────────────────────────────────────────


def button(
    el_id: str,
    parent_id: str | None,
    label: str,
    href: str | None = None,
    target: str = "",
    text_id: str | None = None,
    **opts,
) -> tuple[Element, dict[str, Element]]:
    """Button element plus the text leaf that carries its label.

    Droip's button renderer ignores `contents` and renders only children, so
    the label lives in a separate `text` child. Returns `(button, extras)`;
    `extras` maps the text leaf's ID to the leaf and must be merged into the
    symbol's data map by the caller.
    """
    text_id = text_id or ids.element_id()

    props: dict[str, Any] = {"tag": "button", "contents": [label]}
    if href is not None:
        props["type"] = "href"
        props["attributes"] = {"href": href, "target": target}

    children = list(opts.pop("children", None) or []) + [text_id]
    btn = _base_element(el_id, "button", parent_id, props, {**opts, "children": children})
    label_el = text(text_id, el_id, label)
    return btn, {text_id: label_el}


def link_block(
    el_id: str,
    parent_id: str | None,
    href: str,
    link_type: str = "href",
    target: str = "",
    preload: str = "default",
    dynamic_content: dict | None = None,
    **opts,
) -> Element:
    """Clickable container."""
    props: dict[str, Any] = {
        "tag": "a",
        "type": link_type,
        "isActive": False,
        "preload": preload,
        "attributes": {"href": href, "target": target},
    }
    if dynamic_content is not None:
        props["dynamicContent"] = dynamic_content
    return _base_element(el_id, "link-block", parent_id, props, opts)


# ── Media ───────────────────────────────────────────────────────────────


def image(
    el_id: str,
    parent_id: str | None,
    src: str,
    alt: str = "",
    load: str = "lazy",
    hi_dpi: bool = False,
    width: dict | None = None,
    height: dict | None = None,
    href: str = "",
    target: str = "",
    wp_attachment_id: int | None = None,
    **opts,
) -> Element:
    props: dict[str, Any] = {
        "tag": "img",
        "noEndTag": True,
        "type": "href",
        "load": load,
        "hiDPIStatus": hi_dpi,
        "width": width if width is not None else {"value": "", "unit": "auto"},
        "height": height if height is not None else {"value": "", "unit": "auto"},
        "attributes": {"src": src, "alt": alt, "href": href, "target": target},
    }
    if wp_attachment_id is not None:
        props["wp_attachment_id"] = wp_attachment_id
    return _base_element(el_id, "image", parent_id, props, opts)


def video(
    el_id: str,
    parent_id: str | None,
    src: str,
    controls: bool = True,
    autoplay: bool = False,
    loop: bool = False,
    muted: bool = False,
    **opts,
) -> Element:
    return _base_element(el_id, "video", parent_id, {
        "tag": "video",
        "attributes": {
            "src": src,
            "controls": controls,
            "autoplay": autoplay,
            "loop": loop,
            "muted": muted,
        },
    }, opts)


def svg(el_id: str, parent_id: str | None, svg_outer_html: str, **opts) -> Element:
    """Inline SVG."""
    return _base_element(el_id, "svg", parent_id, {"tag": "svg", "svgOuterHtml": svg_outer_html}, opts)


def icon(el_id: str, parent_id: str | None, icon_class: str, **opts) -> Element:
    return _base_element(el_id, "svg-icon", parent_id, {"tag": "i", "iconClass": icon_class}, opts)


# ── Forms ───────────────────────────────────────────────────────────────


def form(el_id: str, parent_id: str | None, **opts) -> Element:
    return _base_element(el_id, "form", parent_id, {"tag": "form"}, opts)


def input_field(
    el_id: str, parent_id: str | None, input_type: str, field_name: str, placeholder: str = "", **opts
) -> Element:
    return _base_element(el_id, "input", parent_id, {
        "tag": "input",
        "attributes": {"type": input_type, "name": field_name, "placeholder": placeholder},
    }, opts)


def textarea(el_id: str, parent_id: str | None, field_name: str, placeholder: str = "", **opts) -> Element:
    return _base_element(el_id, "textarea", parent_id, {
        "tag": "textarea",
        "attributes": {"name": field_name, "placeholder": placeholder},
    }, opts)


def select(
    el_id: str, parent_id: str | None, field_name: str, choices: list | None = None, **opts
) -> Element:
    """Select dropdown; `choices` is stored as the element's `options` property."""
    return _base_element(el_id, "select", parent_id, {
        "tag": "select",
        "attributes": {"name": field_name},
        "options": list(choices or []),
    }, opts)


# ── Advanced ────────────────────────────────────────────────────────────


def custom_code(el_id: str, parent_id: str | None, html: str, **opts) -> Element:
    """Raw HTML block."""
    return _base_element(el_id, "custom-code", parent_id, {
        "tag": "div",
        "content": html,
        "data-type": "code",
    }, opts)


def symbol_instance(el_id: str, parent_id: str | None, symbol_id: int, **opts) -> Element:
    """Reference to another stored symbol."""
    return _base_element(el_id, "symbol", parent_id, {"tag": "div", "symbolId": symbol_id}, opts)


# ── Collections ─────────────────────────────────────────────────────────
# Collection parts are structural scaffolding and carry `template_mounted`.


def collection(
    el_id: str,
    parent_id: str | None,
    dynamic_content: dict | None = None,
    ui_state: dict | None = None,
    **opts,
) -> Element:
    """Dynamic content repeater.

    `dynamic_content` overrides COLLECTION_DEFAULTS key by key.
    """
    props = {
        "tag": "div",
        "dynamicContent": {**copy.deepcopy(COLLECTION_DEFAULTS), **(dynamic_content or {})},
        "uiState": ui_state if ui_state is not None else {"open": True},
    }
    return _base_element(el_id, "collection", parent_id, props, opts, template_mounted=True)


def collection_items(el_id: str, parent_id: str | None, **opts) -> Element:
    """Items wrapper, direct child of a collection."""
    return _base_element(el_id, "items", parent_id, {"tag": "div"}, opts, template_mounted=True)


def collection_item(el_id: str, parent_id: str | None, **opts) -> Element:
    """Single item template, direct child of items."""
    return _base_element(el_id, "item", parent_id, {"tag": "div"}, opts, template_mounted=True)


def pagination(el_id: str, parent_id: str | None, **opts) -> Element:
    return _base_element(el_id, "pagination", parent_id, {
        "tag": "div",
        "componentType": "pagination",
        "customAttributes": {"data-droip-pagination": ""},
    }, opts, template_mounted=True)


def pagination_item(el_id: str, parent_id: str | None, **opts) -> Element:
    return _base_element(el_id, "pagination-item", parent_id, {"tag": "div"}, opts, template_mounted=True)


def pagination_number(el_id: str, parent_id: str | None, **opts) -> Element:
    return _base_element(el_id, "pagination-number", parent_id, {"tag": "div"}, opts, template_mounted=True)


def empty_state(el_id: str, parent_id: str | None, **opts) -> Element:
    """Shown when a collection has no results."""
    return _base_element(el_id, "empty", parent_id, {"tag": "div"}, opts, template_mounted=True)


def with_dynamic_content(element: Element, content_type: str, value: str) -> Element:
    """Return a copy of `element` bound to a dynamic field.

    Args:
        element: Any element built by this module
        content_type: Source of the value ("post" or "author")
        value: Field name (e.g. "post_title", "featured_image")
    """
    bound = element.model_copy(deep=True)
    bound.properties["dynamicContent"] = {"type": content_type, "value": value}
    bound.template_mounted = True
    return bound
