from tierlist_builder.chain_grouper import build_groups
from tierlist_builder.column_layout import (
    PROGRESSION_SPACING,
    TIER_SPACING,
    assign_chain_columns,
    assign_sequential_columns,
    calculate_layout,
)
from tierlist_builder.core.group import ItemGroup
from tierlist_builder.tags import TagDescriptor, TagEntry

from helpers import flat, make_item, make_tiered, score_map, tier_map


def _layout(tiers, graph, progression=True, descriptors=None, spacing=PROGRESSION_SPACING):
    groups = build_groups(flat(tiers), graph, tier_map(tiers), progression, descriptors)
    columns = calculate_layout(groups, graph, tier_map(tiers), score_map(tiers), spacing)
    return groups, columns


def test_sword_chain_shares_one_column() -> None:
    tiers = make_tiered([
        ("minecraft:wooden_sword", 4.0, 2),
        ("minecraft:stone_sword", 6.0, 3),
        ("minecraft:iron_sword", 9.0, 5),
    ])
    graph = {
        "minecraft:stone_sword": {"minecraft:wooden_sword"},
        "minecraft:iron_sword": {"minecraft:stone_sword"},
    }

    _, columns = _layout(tiers, graph)

    assert columns == {
        "minecraft:wooden_sword": 0,
        "minecraft:stone_sword": 0,
        "minecraft:iron_sword": 0,
    }


def test_tag_groups_are_separated_by_tier_spacing() -> None:
    tiers = make_tiered([
        ("mod:item1", 1.0, 0, ["c:swords"]),
        ("mod:item2", 2.0, 0, ["c:swords"]),
        ("mod:item3", 1.5, 0, ["c:bows"]),
    ])
    descriptors = [
        TagDescriptor.from_entry(TagEntry.from_list(["c:swords", "S", "c"])),
        TagDescriptor.from_entry(TagEntry.from_list(["c:bows", "R", "a"])),
    ]

    groups, columns = _layout(tiers, {}, progression=False, descriptors=descriptors, spacing=TIER_SPACING)

    assert len(groups) == 2
    assert columns == {"mod:item1": 0, "mod:item2": 1, "mod:item3": 4}


def test_sequential_columns_restart_per_tier() -> None:
    tiers = make_tiered([
        ("mod:a", 1.0, 0), ("mod:b", 2.0, 0),
        ("mod:c", 5.0, 1),
    ])

    _, columns = _layout(tiers, {}, progression=False, spacing=TIER_SPACING)

    assert columns == {"mod:a": 0, "mod:b": 1, "mod:c": 0}


def test_chains_occupy_disjoint_column_ranges() -> None:
    tiers = make_tiered([
        ("mod:a0", 1.0, 0), ("mod:b0", 1.0, 0),
        ("mod:a1", 2.0, 1), ("mod:z", 2.0, 1),
        ("mod:b1", 3.0, 2),
    ])
    graph = {"mod:a1": {"mod:a0"}, "mod:b1": {"mod:b0"}}

    groups, columns = _layout(tiers, graph)

    assert columns == {"mod:a0": 0, "mod:a1": 0, "mod:b0": 2, "mod:b1": 2, "mod:z": 4}
    ranges = [g.column_range() for g in groups]
    assert ranges == [(0, 0), (2, 2), (4, 4)]


def test_no_two_chain_items_share_a_tier_column() -> None:
    tm = {"mod:ingot": 0, "mod:rod": 0, "mod:sword": 1, "mod:axe": 1, "mod:hammer": 2}
    graph = {
        "mod:sword": {"mod:ingot", "mod:rod"},
        "mod:axe": {"mod:ingot"},
        "mod:hammer": {"mod:sword", "mod:axe"},
    }
    scores = {"mod:ingot": 1.0, "mod:rod": 0.5, "mod:sword": 3.0, "mod:axe": 2.0, "mod:hammer": 5.0}

    columns = assign_chain_columns(tm, graph, tm, scores)

    slots = [(tm[i], c) for i, c in columns.items()]
    assert len(slots) == len(set(slots))
    for dependent, ingredients in graph.items():
        for ingredient in ingredients:
            if tm[ingredient] < tm[dependent]:
                assert columns[dependent] >= columns[ingredient]


def test_dependent_reuses_right_most_free_ingredient_column() -> None:
    tm = {"mod:a": 0, "mod:b": 0, "mod:c": 1}
    scores = {"mod:a": 1.0, "mod:b": 2.0, "mod:c": 3.0}

    columns = assign_chain_columns(tm, {"mod:c": {"mod:a", "mod:b"}}, tm, scores)

    assert columns == {"mod:a": 0, "mod:b": 1, "mod:c": 1}


def test_layout_is_deterministic() -> None:
    tiers = make_tiered([("mod:x", 1.0, 0), ("mod:y", 2.0, 1), ("mod:w", 1.0, 0)])
    graph = {"mod:y": {"mod:x", "mod:w"}}

    _, first = _layout(tiers, graph)
    _, second = _layout(tiers, graph)

    assert first == second


def test_items_missing_from_tier_map_share_their_own_bucket() -> None:
    group = ItemGroup.isolated([make_item("mod:a", 1.0), make_item("mod:stray", 0.5)])

    assign_sequential_columns(group, {"mod:a": 0}, {"mod:a": 1.0}, 0)

    assert group.column_assignments == {"mod:a": 0, "mod:stray": 0}
