"""Pytest configuration for Droip Bridge tests.

Points the data directory at a throwaway location before any droip_bridge
module is imported, so importing the server (which configures file logging)
never touches ~/.droip-bridge.
"""

import os
import tempfile

import pytest

os.environ.setdefault("DROIP_BRIDGE_DATA_DIR", tempfile.mkdtemp(prefix="droip-bridge-tests-"))

from droip_bridge.persistence import SymbolStore  # noqa: E402


def _element(el_id, name, parent_id, children=None, **extra):
    element = {
        "visibility": True,
        "collapse": False,
        "name": name,
        "title": str(name).title(),
        "properties": {"tag": "div", "symbolElPropId": "sep" + el_id[2:].ljust(7, "0")[:7]},
        "styleIds": [],
        "className": "",
        "source": "droip",
        "id": el_id,
        "parentId": parent_id,
    }
    if children is not None:
        element["children"] = children
    element.update(extra)
    return element


@pytest.fixture
def make_element():
    """Factory for raw element dicts in wire shape."""
    return _element


@pytest.fixture
def valid_symbol_data():
    """A small, valid hero symbol: section > heading + button > text."""
    heading = _element("dphead01", "heading", "dproot01")
    heading["properties"].update({"tag": "h1", "contents": ["Welcome"]})
    button = _element("dpbtn001", "button", "dproot01", children=["dptext01"])
    button["properties"].update({"tag": "button", "contents": ["Get Started"]})
    label = _element("dptext01", "text", "dpbtn001")
    label["properties"].update({"tag": "span", "contents": ["Get Started"]})

    root = _element("dproot01", "section", None, children=["dphead01", "dpbtn001"], styleIds=["mcpbr_dphero1"])
    root["properties"]["tag"] = "section"

    return {
        "name": "Hero",
        "category": "Sections",
        "root": "dproot01",
        "setAs": "",
        "customFonts": {},
        "data": {
            "dproot01": root,
            "dphead01": heading,
            "dpbtn001": button,
            "dptext01": label,
        },
        "styleBlocks": {
            "mcpbr_dphero1": {
                "id": "mcpbr_dphero1",
                "type": "class",
                "name": "hero",
                "variant": {"md": "display:flex;padding:80px 24px;"},
                "isGlobal": True,
                "isSymbolStyle": True,
            },
        },
    }


@pytest.fixture
async def store(tmp_path):
    """Symbol store backed by a temp database."""
    symbol_store = SymbolStore(db_path=str(tmp_path / "test.db"))
    yield symbol_store
    await symbol_store.close_pool()
