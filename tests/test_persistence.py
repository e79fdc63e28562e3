"""Tests for SymbolStore: symbols, roles, pages, and site-wide data."""

from droip_bridge.persistence import (
    GLOBAL_STYLE_BLOCKS_KEY,
    MAX_LISTED_PAGES,
    SymbolStore,
)


class TestSymbols:
    async def test_save_and_get(self, store, valid_symbol_data):
        saved = await store.save({"symbolData": valid_symbol_data})
        assert saved == {"id": saved["id"], "symbolData": valid_symbol_data, "type": "symbol"}

        fetched = await store.get_symbol(saved["id"])
        assert fetched == {"id": saved["id"], "symbolData": valid_symbol_data}

    async def test_save_rejects_missing_symbol_data(self, store):
        assert await store.save({}) is None
        assert await store.save({"symbolData": "nope"}) is None
        assert await store.list_symbols() == []

    async def test_get_missing(self, store):
        assert await store.get_symbol(999) is None

    async def test_list_ordered_by_id(self, store, valid_symbol_data):
        first = await store.save({"symbolData": {**valid_symbol_data, "name": "A"}})
        second = await store.save({"symbolData": {**valid_symbol_data, "name": "B"}})
        symbols = await store.list_symbols()
        assert [s["id"] for s in symbols] == [first["id"], second["id"]]
        assert [s["symbolData"]["name"] for s in symbols] == ["A", "B"]

    async def test_update(self, store, valid_symbol_data):
        saved = await store.save({"symbolData": valid_symbol_data})
        changed = {**valid_symbol_data, "name": "Renamed"}
        assert await store.update_symbol(saved["id"], changed) is True
        assert (await store.get_symbol(saved["id"]))["symbolData"]["name"] == "Renamed"

    async def test_update_missing(self, store, valid_symbol_data):
        assert await store.update_symbol(404, valid_symbol_data) is False

    async def test_delete(self, store, valid_symbol_data):
        saved = await store.save({"symbolData": valid_symbol_data})
        assert await store.delete_symbol(saved["id"]) is True
        assert await store.get_symbol(saved["id"]) is None
        assert await store.delete_symbol(saved["id"]) is False

    async def test_persists_across_instances(self, tmp_path, valid_symbol_data):
        db_path = str(tmp_path / "shared.db")
        writer = SymbolStore(db_path=db_path)
        saved = await writer.save({"symbolData": valid_symbol_data})
        await writer.close_pool()

        reader = SymbolStore(db_path=db_path)
        assert (await reader.get_symbol(saved["id"]))["symbolData"]["name"] == "Hero"
        await reader.close_pool()


class TestRoles:
    async def test_claim_role_clears_others(self, store, valid_symbol_data):
        old = await store.save({"symbolData": {**valid_symbol_data, "name": "Old", "setAs": "header"}})
        new = await store.save({"symbolData": {**valid_symbol_data, "name": "New", "setAs": "header"}})

        cleared = await store.claim_role(new["id"], "header")

        assert cleared == [old["id"]]
        assert (await store.get_symbol(old["id"]))["symbolData"]["setAs"] == ""
        assert await store.role_holder("header") == new["id"]

    async def test_claim_role_leaves_other_roles(self, store, valid_symbol_data):
        footer = await store.save({"symbolData": {**valid_symbol_data, "setAs": "footer"}})
        header = await store.save({"symbolData": {**valid_symbol_data, "setAs": "header"}})
        assert await store.claim_role(header["id"], "header") == []
        assert await store.role_holder("footer") == footer["id"]

    async def test_empty_role_is_noop(self, store, valid_symbol_data):
        await store.save({"symbolData": valid_symbol_data})
        assert await store.claim_role(1, "") == []
        assert await store.role_holder("") is None


class TestPages:
    async def test_add_and_get(self, store):
        blocks = {"body": {"id": "body", "name": "div", "children": []}}
        page_id = await store.add_page("Home", slug="home", editor_mode="droip", blocks=blocks)
        page = await store.get_page(page_id)
        assert page["title"] == "Home"
        assert page["slug"] == "home"
        assert page["status"] == "publish"
        assert page["editor_mode"] == "droip"
        assert page["blocks"] == blocks
        assert page["style_blocks"] is None

    async def test_list_filters_type_and_status(self, store):
        await store.add_page("Page")
        await store.add_page("Draft", status="draft")
        await store.add_page("Trashed", status="trash")
        await store.add_page("Post", post_type="post")

        titles = [p["title"] for p in await store.list_pages()]
        assert titles == ["Page", "Draft"]
        assert [p["title"] for p in await store.list_pages("post")] == ["Post"]

    async def test_list_is_capped(self, store):
        for i in range(MAX_LISTED_PAGES + 3):
            await store.add_page(f"Page {i}")
        assert len(await store.list_pages()) == MAX_LISTED_PAGES

    async def test_update_blocks(self, store):
        page_id = await store.add_page("Home", blocks={})
        assert await store.update_page_blocks(page_id, {"body": {"id": "body"}}) is True
        assert (await store.get_page(page_id))["blocks"] == {"body": {"id": "body"}}
        assert await store.update_page_blocks(999, {}) is False


class TestGlobalData:
    async def test_missing_key(self, store):
        assert await store.get_global(GLOBAL_STYLE_BLOCKS_KEY) is None

    async def test_set_and_overwrite(self, store):
        await store.set_global(GLOBAL_STYLE_BLOCKS_KEY, {"g1": {"id": "g1"}})
        await store.set_global(GLOBAL_STYLE_BLOCKS_KEY, {"g2": {"id": "g2"}})
        assert await store.get_global(GLOBAL_STYLE_BLOCKS_KEY) == {"g2": {"id": "g2"}}
