from tierlist_builder.core.group import ItemGroup
from tierlist_builder.core.union_find import UnionFind
from tierlist_builder.validator import detect_cycles, get_validation_summary, validate_layout

from helpers import make_item


def _chain(ids, columns):
    group = ItemGroup.progression_chain([make_item(i) for i in ids], ids)
    for item_id, column in columns.items():
        group.set_column(item_id, column)
    return group


def test_valid_chain_layout() -> None:
    graph = {"b": {"a"}}
    group = _chain(["a", "b"], {"a": 0, "b": 0})

    result = validate_layout([group], {"a", "b"}, {"a": 0, "b": 1}, graph, [("b", "a")])

    assert result.valid, result.errors
    assert result.total_items == 2


def test_dependent_left_of_ingredient_is_reported() -> None:
    graph = {"b": {"a"}}
    group = _chain(["a", "b"], {"a": 1, "b": 0})

    result = validate_layout([group], {"a", "b"}, {"a": 0, "b": 1}, graph, [])

    assert not result.valid
    assert result.order_violations == [("b", "a")]


def test_partition_problems_and_collisions() -> None:
    first = ItemGroup.isolated([make_item("a"), make_item("b")])
    first.set_column("a", 0)
    first.set_column("b", 0)
    second = ItemGroup.isolated([make_item("b")])
    second.set_column("b", 0)

    result = validate_layout([first, second], {"a", "b", "c"}, {"a": 0, "b": 0}, {}, [])

    assert result.duplicates == ["b"]
    assert result.missing == ["c"]
    assert result.column_collisions == [(0, 0, 0)]
    assert any("overlap" in e for e in result.errors)


def test_split_component_is_reported() -> None:
    graph = {"b": {"a"}}
    groups = [_chain(["a"], {"a": 0}), _chain(["b"], {"b": 2})]

    result = validate_layout(groups, {"a", "b"}, {"a": 0, "b": 1}, graph, [])

    assert any("connectivity" in e for e in result.errors)


def test_detect_cycles() -> None:
    assert detect_cycles([("a", "b"), ("b", "c")]) == []
    assert detect_cycles([("a", "b"), ("b", "a")]) == [["a", "b"]]


def test_validation_summary() -> None:
    good = validate_layout([], set(), {}, {}, [])
    bad = validate_layout([], {"x"}, {}, {}, [])

    summary = get_validation_summary({"weapons": good, "armor": bad})

    assert summary["all_valid"] is False
    assert summary["valid_kinds"] == 1
    assert summary["total_items"] == 1
    assert summary["total_errors"] == 1


def test_union_find_groups() -> None:
    uf = UnionFind(["a", "b", "c", "d"])

    assert uf.union("a", "c") is True
    assert uf.union("c", "a") is False
    uf.union("d", "b")

    assert uf.connected("a", "c")
    assert not uf.connected("a", "b")
    assert uf.groups() == [["a", "c"], ["b", "d"]]
