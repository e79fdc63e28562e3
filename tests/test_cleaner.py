"""Tests for the symbol data cleaner."""

import pytest

from droip_bridge.cleaner import CONTENT_ELEMENTS, clean_symbol_data
from droip_bridge.validator import validate


def _symbol(data, root="dproot01"):
    return {"name": "Test", "root": root, "data": data, "styleBlocks": {}}


class TestEmptyChildren:
    def test_removed_from_content_elements(self, make_element):
        data = {
            "dproot01": make_element("dproot01", "section", None, children=["dphead01"]),
            "dphead01": make_element("dphead01", "heading", "dproot01", children=[]),
        }
        cleaned = clean_symbol_data(_symbol(data))
        assert "children" not in cleaned["data"]["dphead01"]

    def test_kept_on_containers(self, make_element):
        data = {
            "dproot01": make_element("dproot01", "section", None, children=["dpbox001"]),
            "dpbox001": make_element("dpbox001", "div", "dproot01", children=[]),
        }
        cleaned = clean_symbol_data(_symbol(data))
        assert cleaned["data"]["dpbox001"]["children"] == []

    def test_non_empty_children_kept(self, make_element):
        data = {
            "dproot01": make_element("dproot01", "section", None, children=["dplink01"]),
            "dplink01": make_element("dplink01", "link-text", "dproot01", children=["dpspan01"]),
            "dpspan01": make_element("dpspan01", "text", "dplink01"),
        }
        cleaned = clean_symbol_data(_symbol(data))
        assert cleaned["data"]["dplink01"]["children"] == ["dpspan01"]

    @pytest.mark.parametrize("kind", sorted(CONTENT_ELEMENTS))
    def test_removed_from_every_content_kind(self, make_element, kind):
        data = {
            "dproot01": make_element("dproot01", "section", None, children=["dpleaf01"]),
            "dpleaf01": make_element("dpleaf01", kind, "dproot01", children=[]),
        }
        cleaned = clean_symbol_data(_symbol(data))
        assert "children" not in cleaned["data"]["dpleaf01"]


class TestButtonLabels:
    def test_adds_text_child_from_contents(self, make_element):
        btn = make_element("dpbtn001", "button", "dproot01")
        btn["properties"]["contents"] = ["Click Me"]
        data = {
            "dproot01": make_element("dproot01", "section", None, children=["dpbtn001"]),
            "dpbtn001": btn,
        }
        cleaned = clean_symbol_data(_symbol(data))

        button = cleaned["data"]["dpbtn001"]
        assert len(button["children"]) == 1
        text = cleaned["data"][button["children"][0]]
        assert text["name"] == "text"
        assert text["parentId"] == "dpbtn001"
        assert text["properties"]["tag"] == "span"
        assert text["properties"]["contents"] == ["Click Me"]
        assert "children" not in text

    def test_default_label(self, make_element):
        data = {
            "dproot01": make_element("dproot01", "section", None, children=["dpbtn001"]),
            "dpbtn001": make_element("dpbtn001", "button", "dproot01", children=[]),
        }
        cleaned = clean_symbol_data(_symbol(data))
        text_id = cleaned["data"]["dpbtn001"]["children"][0]
        assert cleaned["data"][text_id]["properties"]["contents"] == ["Button"]

    def test_existing_text_child_untouched(self, valid_symbol_data):
        cleaned = clean_symbol_data(valid_symbol_data)
        assert cleaned["data"]["dpbtn001"]["children"] == ["dptext01"]
        assert len(cleaned["data"]) == len(valid_symbol_data["data"])

    def test_label_appended_after_other_children(self, make_element):
        data = {
            "dproot01": make_element("dproot01", "section", None, children=["dpbtn001"]),
            "dpbtn001": make_element("dpbtn001", "button", "dproot01", children=["dpicon01"]),
            "dpicon01": make_element("dpicon01", "svg-icon", "dpbtn001"),
        }
        cleaned = clean_symbol_data(_symbol(data))
        children = cleaned["data"]["dpbtn001"]["children"]
        assert children[0] == "dpicon01"
        assert cleaned["data"][children[1]]["name"] == "text"

    def test_cleaned_button_validates(self, make_element):
        data = {
            "dproot01": make_element("dproot01", "section", None, children=["dpbtn001"]),
            "dpbtn001": make_element("dpbtn001", "button", "dproot01"),
        }
        result = validate(clean_symbol_data(_symbol(data)))
        assert result.valid, result.errors
        assert result.warnings == []


class TestRootParent:
    def test_root_parent_forced_to_null(self, make_element):
        data = {"dproot01": make_element("dproot01", "section", "body")}
        cleaned = clean_symbol_data(_symbol(data))
        assert cleaned["data"]["dproot01"]["parentId"] is None


class TestCleanerContract:
    def test_does_not_mutate_input(self, make_element):
        data = {
            "dproot01": make_element("dproot01", "section", "body", children=["dpbtn001"]),
            "dpbtn001": make_element("dpbtn001", "button", "dproot01"),
        }
        original = _symbol(data)
        clean_symbol_data(original)
        assert original["data"]["dproot01"]["parentId"] == "body"
        assert "children" not in original["data"]["dpbtn001"]
        assert len(original["data"]) == 2

    def test_idempotent(self, make_element):
        data = {
            "dproot01": make_element("dproot01", "section", "body", children=["dpbtn001", "dphead01"]),
            "dpbtn001": make_element("dpbtn001", "button", "dproot01"),
            "dphead01": make_element("dphead01", "heading", "dproot01", children=[]),
        }
        once = clean_symbol_data(_symbol(data))
        twice = clean_symbol_data(once)
        assert twice == once

    def test_malformed_data_passed_through(self):
        symbol = {"name": "Broken", "root": "x", "data": "not a map", "styleBlocks": {}}
        assert clean_symbol_data(symbol) == symbol

    def test_non_dict_elements_left_for_validator(self, make_element):
        data = {
            "dproot01": make_element("dproot01", "section", None),
            "dpbad001": "oops",
        }
        cleaned = clean_symbol_data(_symbol(data))
        assert cleaned["data"]["dpbad001"] == "oops"

    def test_unhashable_name_left_for_validator(self, make_element):
        data = {
            "dproot01": make_element("dproot01", "section", None, children=["dpodd001"]),
            "dpodd001": make_element("dpodd001", ["heading"], "dproot01", children=[]),
        }
        cleaned = clean_symbol_data(_symbol(data))
        assert cleaned["data"]["dpodd001"]["children"] == []

        result = validate(cleaned)
        assert any(w.startswith("Element 'dpodd001' has unknown type") for w in result.warnings)
