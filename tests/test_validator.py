"""Tests for symbol validation."""

from droip_bridge.validator import validate


def _minimal(make_element, **overrides):
    symbol = {
        "name": "Test",
        "root": "root",
        "data": {"root": make_element("root", "section", None)},
        "styleBlocks": {},
    }
    symbol.update(overrides)
    return symbol


class TestTopLevel:
    def test_valid_symbol(self, valid_symbol_data):
        result = validate(valid_symbol_data)
        assert result.valid
        assert result.errors == []
        assert result.warnings == []

    def test_missing_fields(self):
        result = validate({"name": "X"})
        assert not result.valid
        assert result.errors == [
            "Missing required field: 'root'",
            "Missing required field: 'data'",
            "Missing required field: 'styleBlocks'",
        ]

    def test_empty_name_is_missing(self, make_element):
        result = validate(_minimal(make_element, name=""))
        assert result.errors == ["Missing required field: 'name'"]

    def test_missing_fields_stop_further_checks(self):
        result = validate({"root": "a", "data": {"b": "not an element"}, "styleBlocks": {}})
        assert result.errors == ["Missing required field: 'name'"]

    def test_not_an_object(self):
        result = validate(["not", "a", "dict"])
        assert not result.valid
        assert result.errors == ["Symbol data must be an object"]

    def test_data_must_be_map(self):
        result = validate({"name": "X", "root": "r", "data": [], "styleBlocks": {}})
        assert result.errors == ["Field 'data' must be an object keyed by ID"]


class TestRoot:
    def test_root_not_found(self, make_element):
        result = validate(_minimal(make_element, root="nope"))
        assert not result.valid
        assert "Root element 'nope' not found in data map" in result.errors

    def test_root_with_parent_warns(self, make_element):
        symbol = _minimal(make_element)
        symbol["data"]["root"]["parentId"] = "body"
        result = validate(symbol)
        assert "Root element should have parentId = null" in result.warnings


class TestElements:
    def test_missing_element_fields(self, make_element):
        symbol = _minimal(make_element)
        symbol["data"]["child"] = {"parentId": "root"}
        symbol["data"]["root"]["children"] = ["child"]
        result = validate(symbol)
        assert "Element 'child' missing required field: 'name'" in result.errors
        assert "Element 'child' missing required field: 'properties'" in result.errors
        assert "Element 'child' missing required field: 'id'" in result.errors

    def test_key_id_mismatch(self, make_element):
        symbol = _minimal(make_element)
        symbol["data"]["root"]["id"] = "other"
        result = validate(symbol)
        assert "Element key 'root' does not match element id 'other'" in result.errors

    def test_unknown_type_warns(self, make_element):
        symbol = _minimal(make_element)
        symbol["data"]["root"]["name"] = "fancy-widget"
        result = validate(symbol)
        assert result.valid
        assert "Element 'root' has unknown type 'fancy-widget' (this may be a custom element)" in result.warnings

    def test_builder_kinds_known(self, make_element):
        symbol = _minimal(make_element)
        symbol["data"]["root"]["children"] = ["label"]
        symbol["data"]["label"] = make_element("label", "text", "root")
        result = validate(symbol)
        assert result.warnings == []

    def test_dangling_parent(self, make_element):
        symbol = _minimal(make_element)
        symbol["data"]["root"]["children"] = ["x"]
        symbol["data"]["x"] = make_element("x", "div", "ghost")
        result = validate(symbol)
        assert not result.valid
        assert "Element 'x' references non-existent parent 'ghost'" in result.errors

    def test_dangling_child(self, make_element):
        symbol = _minimal(make_element)
        symbol["data"]["root"]["children"] = ["ghost"]
        result = validate(symbol)
        assert not result.valid
        assert "Element 'root' references non-existent child 'ghost'" in result.errors

    def test_dangling_style_reference_warns(self, make_element):
        symbol = _minimal(make_element)
        symbol["data"]["root"]["styleIds"] = ["missing_style"]
        result = validate(symbol)
        assert result.valid
        assert "Element 'root' references non-existent style block 'missing_style'" in result.warnings

    def test_parent_child_mismatch_is_tolerated(self, make_element):
        """parentId and children are not cross-checked against each other."""
        symbol = _minimal(make_element)
        symbol["data"]["root"]["children"] = ["a", "b"]
        symbol["data"]["a"] = make_element("a", "div", "root", children=[])
        symbol["data"]["b"] = make_element("b", "div", "a")
        result = validate(symbol)
        assert result.valid
        assert result.errors == []


class TestOrphans:
    def test_orphan_warning(self, make_element):
        symbol = _minimal(make_element)
        symbol["data"]["x"] = make_element("x", "div", "root")
        result = validate(symbol)
        assert result.valid
        assert result.errors == []
        assert result.warnings == ["Element 'x' is orphaned (not referenced as a child of any element)"]

    def test_root_is_never_orphaned(self, make_element):
        assert validate(_minimal(make_element)).warnings == []


class TestCycles:
    def test_cycle_is_error(self, make_element):
        symbol = _minimal(make_element)
        symbol["data"]["root"]["children"] = ["a"]
        symbol["data"]["a"] = make_element("a", "div", "root", children=["b"])
        symbol["data"]["b"] = make_element("b", "div", "a", children=["a"])
        result = validate(symbol)
        assert not result.valid
        cycle_errors = [e for e in result.errors if e.startswith("Child references form a cycle")]
        assert len(cycle_errors) == 1
        assert "a" in cycle_errors[0] and "b" in cycle_errors[0]

    def test_self_reference(self, make_element):
        symbol = _minimal(make_element)
        symbol["data"]["root"]["children"] = ["root"]
        result = validate(symbol)
        assert "Child references form a cycle: root -> root" in result.errors

    def test_tree_has_no_cycle(self, valid_symbol_data):
        result = validate(valid_symbol_data)
        assert not any("cycle" in e for e in result.errors)


class TestStyleBlocks:
    def test_missing_variant(self, make_element):
        symbol = _minimal(make_element, styleBlocks={"s1": {"id": "s1"}})
        result = validate(symbol)
        assert not result.valid
        assert result.errors == ["Style block 's1' missing or invalid 'variant' field"]

    def test_missing_id(self, make_element):
        symbol = _minimal(make_element, styleBlocks={"s1": {"variant": {"md": "color:red;"}}})
        result = validate(symbol)
        assert result.errors == ["Style block 's1' missing 'id' field"]

    def test_md_must_be_string(self, make_element):
        symbol = _minimal(make_element, styleBlocks={"s1": {"id": "s1", "variant": {"md": 123}}})
        result = validate(symbol)
        assert result.errors == ["Style block 's1' variant 'md' must be a CSS string"]

    def test_variant_without_md_is_fine(self, make_element):
        symbol = _minimal(make_element, styleBlocks={"s1": {"id": "s1", "variant": {"tablet": "gap:4px;"}}})
        assert validate(symbol).valid


class TestResultShape:
    def test_valid_matches_errors(self, make_element):
        for symbol in (_minimal(make_element), _minimal(make_element, root="missing")):
            result = validate(symbol)
            assert result.valid == (result.errors == [])

    def test_does_not_mutate_input(self, valid_symbol_data):
        import copy

        snapshot = copy.deepcopy(valid_symbol_data)
        validate(valid_symbol_data)
        assert valid_symbol_data == snapshot
