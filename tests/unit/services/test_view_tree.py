import pytest

from entity_engine.services.view_tree import map_view_items


def _copy_transform(item: dict):
    if item.get("drop"):
        return None, None
    return {"name": item["name"]}, item.get("fields")


def _attach(node: dict, children: list) -> None:
    node["fields"] = children


@pytest.mark.unit
class TestMapViewItems:

    def test_preserves_order(self):
        """Test rebuilt items keep their source order at every level."""
        items = [
            {"name": "a"},
            {"name": "panel", "fields": [{"name": "b"}, {"name": "c"}, {"name": "d"}]},
            {"name": "e"},
        ]

        result = map_view_items(items, _copy_transform, _attach)

        assert result == [
            {"name": "a"},
            {"name": "panel", "fields": [{"name": "b"}, {"name": "c"}, {"name": "d"}]},
            {"name": "e"},
        ]

    def test_dropped_items_are_removed(self):
        """Test items the transform drops leave no gaps."""
        items = [{"name": "a", "drop": True}, {"name": "p", "fields": [{"name": "x", "drop": True}, {"name": "y"}]}]

        result = map_view_items(items, _copy_transform, _attach)

        assert result == [{"name": "p", "fields": [{"name": "y"}]}]

    def test_empty_panels(self):
        """Test empty panels keep an empty list unless told otherwise."""
        items = [{"name": "p", "fields": [{"name": "x", "drop": True}]}]

        assert map_view_items(items, _copy_transform, _attach) == [{"name": "p", "fields": []}]
        assert map_view_items(items, _copy_transform, _attach, keep_empty_panels=False) == [{"name": "p"}]

    def test_deep_nesting(self):
        """Test trees deeper than the interpreter recursion limit are rebuilt."""
        depth = 5000
        root = {"name": "leaf"}
        for level in range(depth):
            root = {"name": f"panel_{level}", "fields": [root]}

        result = map_view_items([root], _copy_transform, _attach)

        node = result[0]
        levels = 0
        while "fields" in node:
            node = node["fields"][0]
            levels += 1
        assert levels == depth
        assert node == {"name": "leaf"}
