import json

from tierlist_builder.config import TierlistConfig
from tierlist_builder.generator import generate_from_data, generate_kind, generate_tierlists
from tierlist_builder.recipe_graph import static_graph_source
from tierlist_builder.scoring import ItemKind, armor_label, weapon_dps, weapon_kind

from helpers import make_item

SWORD_GRAPH = {
    "minecraft:stone_sword": {"minecraft:wooden_sword"},
    "minecraft:iron_sword": {"minecraft:stone_sword"},
}


def _swords():
    return [
        make_item("minecraft:wooden_sword", 4.0),
        make_item("minecraft:stone_sword", 6.0),
        make_item("minecraft:iron_sword", 9.0),
    ]


class _BrokenStrategy:
    def tiers(self, scores):
        raise RuntimeError("strategy exploded")


def test_sword_progression_end_to_end() -> None:
    result = generate_kind(weapon_kind(), _swords(), TierlistConfig(), static_graph_source(SWORD_GRAPH))

    assert result.mode == "chain"
    assert sorted(result.tiers) == [2, 3, 5]
    assert set(result.columns.values()) == {0}
    assert [(e.dependent, e.dependency) for e in result.edges] == [
        ("minecraft:iron_sword", "minecraft:stone_sword"),
        ("minecraft:stone_sword", "minecraft:wooden_sword"),
    ]
    assert result.validation.valid, result.validation.errors
    assert result.plan.markers[0].label == "[2] DPS: [3.2-4.8)"


def test_generation_is_idempotent() -> None:
    config = TierlistConfig()
    source = static_graph_source(SWORD_GRAPH)

    first = generate_kind(weapon_kind(), _swords(), config, source).to_dict()
    second = generate_kind(weapon_kind(), _swords(), config, source).to_dict()

    assert first == second


def test_override_moves_item_between_tiers() -> None:
    config = TierlistConfig.from_dict({"weaponTierOverrides": ["minecraft:iron_sword=9"]})

    result = generate_kind(weapon_kind(config), _swords(), config)

    assert result.tier_of("minecraft:iron_sword") == 9
    assert result.tier_of("minecraft:wooden_sword") == 2


def test_failing_graph_source_degrades_to_tag_mode(capsys) -> None:
    def broken(item_ids):
        raise ConnectionError("recipe index unavailable")

    result = generate_kind(weapon_kind(), _swords(), TierlistConfig(), broken)

    assert result.mode == "tag"
    assert "recipe index unavailable" in result.degraded
    assert result.edges == []
    assert result.validation.valid
    assert "continuing without progression alignment" in capsys.readouterr().out


def test_empty_kind_is_skipped() -> None:
    results = generate_tierlists({"weapons": _swords()}, TierlistConfig())

    assert results["armor"].skipped is True
    assert results["weapons"].skipped is False


def test_failing_kind_does_not_affect_other_kinds() -> None:
    kinds = {
        "weapons": weapon_kind(),
        "broken": ItemKind(name="broken", score_fn=weapon_dps, tier_strategy=_BrokenStrategy(),
                           label_fn=armor_label),
    }

    results = generate_tierlists(
        {"weapons": _swords(), "broken": [make_item("mod:thing", 1.0)]},
        TierlistConfig(), static_graph_source(SWORD_GRAPH), kinds,
    )

    assert results["broken"].error is not None
    assert "strategy exploded" in results["broken"].error
    assert results["weapons"].error is None
    assert results["weapons"].validation.valid


def test_duplicate_items_are_ignored() -> None:
    items = _swords() + [make_item("minecraft:iron_sword", 1.0)]

    result = generate_kind(weapon_kind(), items, TierlistConfig())

    assert sum(len(v) for v in result.tiers.values()) == 3
    assert result.tier_of("minecraft:iron_sword") == 5


def test_tag_mode_places_headers() -> None:
    config = TierlistConfig.from_dict({
        "enableProgressionAlignment": False,
        "tags": [["c:swords", "S", "c", "minecraft:iron_sword", "Swords"]],
    })
    items = [
        make_item("mod:a", 1.0, tags=["c:swords"]),
        make_item("mod:b", 1.2, tags=["c:swords"]),
        make_item("mod:c", 1.1),
    ]

    result = generate_kind(weapon_kind(config), items, config)

    assert result.mode == "tag"
    assert result.columns == {"mod:a": 0, "mod:b": 1, "mod:c": 4}
    assert [h.title for h in result.plan.headers] == ["Swords"]


def test_generate_from_data_builds_json_ready_output() -> None:
    data = {
        "items": [
            {"id": "minecraft:wooden_sword", "attackDamage": 4, "attackSpeed": 1.6, "tags": ["minecraft:swords"]},
            {"id": "minecraft:stone_sword", "attackDamage": 5, "attackSpeed": 1.6, "tags": ["minecraft:swords"]},
            {"id": "minecraft:iron_helmet", "armor": 2, "toughness": 0},
            {"id": "minecraft:stick"},
        ],
        "recipes": [
            {
                "id": "minecraft:stone_sword",
                "category": "minecraft:crafting",
                "output": "minecraft:stone_sword",
                "inputs": [["minecraft:wooden_sword"], ["minecraft:stick"]],
            },
        ],
    }

    output = generate_from_data(data, {"tierMultiplier": 1.6})

    json.dumps(output)
    assert output["validation"]["all_valid"] is True
    weapons = output["kinds"]["weapons"]
    assert weapons["mode"] == "chain"
    assert sorted(weapons["columns"]) == ["minecraft:stone_sword", "minecraft:wooden_sword"]
    assert weapons["edges"] == [{"dependent": "minecraft:stone_sword", "dependency": "minecraft:wooden_sword"}]
    assert output["kinds"]["armor"]["tiers"] == {"2": ["minecraft:iron_helmet"]}


def test_generate_from_data_uses_supplied_scores() -> None:
    data = {"items": [{"id": "mod:a", "score": 4.0}, {"id": "mod:b", "score": 9.0}]}

    output = generate_from_data(data, {"enableArmorTierlist": False})

    weapons = output["kinds"]["weapons"]
    assert weapons["skipped"] is False
    assert weapons["tiers"] == {"2": ["mod:a"], "5": ["mod:b"]}


def test_supplied_score_wins_when_tags_admit_the_item() -> None:
    data = {"items": [
        {"id": "mod:a", "score": 4.0, "tags": ["c:swords"]},
        {"id": "mod:b", "score": 9.0},
    ]}

    output = generate_from_data(data, {"enableArmorTierlist": False, "weaponTags": ["c:swords"]})

    assert output["kinds"]["weapons"]["tiers"] == {"2": ["mod:a"]}
