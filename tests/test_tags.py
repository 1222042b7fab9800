import pytest

from tierlist_builder.errors import ConfigError
from tierlist_builder.tags import TagEntry, parse_tag_entries, tag_index

from helpers import make_item


def test_tag_entry_from_list() -> None:
    entry = TagEntry.from_list(["c:swords, minecraft:swords", "Swords", "cyan", "minecraft:iron_sword"])

    assert entry.tags == ("c:swords", "minecraft:swords")
    assert (entry.label, entry.color) == ("S", "c")
    assert entry.header_title == "minecraft:iron_sword"
    assert entry.matches(make_item("mod:x", tags=["minecraft:swords"]))


@pytest.mark.parametrize("raw", [["c:swords"], ["", "S", "c"], "c:swords,S,c"])
def test_tag_entry_rejects_malformed(raw) -> None:
    with pytest.raises(ConfigError):
        TagEntry.from_list(raw)


def test_parse_tag_entries_skips_bad_entries(capsys) -> None:
    entries = parse_tag_entries([["c:axes", "A", "6"], ["broken"]])

    assert [e.label for e in entries] == ["A"]
    assert "Skipping tag entry" in capsys.readouterr().out


def test_tag_index() -> None:
    entries = parse_tag_entries([["c:swords", "S", "c"], ["c:axes", "A", "6"]])

    assert tag_index(make_item("mod:axe", tags=["c:axes"]), entries) == 1
    assert tag_index(make_item("mod:rock"), entries) == -1
