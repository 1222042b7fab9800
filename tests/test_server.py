import io
import json

from tierlist_builder.server import handle_validate_config, main, serve


def _run(*requests):
    lines = [r if isinstance(r, str) else json.dumps(r) for r in requests]
    out = io.StringIO()
    serve(io.StringIO("\n".join(lines) + "\n"), out)
    return [json.loads(line) for line in out.getvalue().splitlines()]


def test_ready_ping_and_shutdown() -> None:
    responses = _run(
        {"id": "req_1", "command": "ping"},
        {"id": "req_2", "command": "shutdown"},
        {"id": "req_3", "command": "ping"},
    )

    assert responses[0]["id"] == "__ready__"
    assert "generate" in responses[0]["result"]["commands"]
    assert responses[1] == {"id": "req_1", "success": True,
                            "result": {"status": "alive", "pid": responses[1]["result"]["pid"]}}
    assert responses[2]["result"] == {"status": "shutting_down"}
    assert len(responses) == 3


def test_unknown_command_and_bad_json() -> None:
    responses = _run({"id": "req_1", "command": "explode"}, "{not json")

    assert responses[1] == {"id": "req_1", "success": False, "error": "Unknown command: explode"}
    assert responses[2]["success"] is False
    assert responses[2]["error"].startswith("Invalid JSON")


def test_generate_command_keeps_stdout_clean(capsys) -> None:
    request = {
        "id": "gen",
        "command": "generate",
        "data": {
            "items": [{"id": "minecraft:iron_sword", "kind": "weapons", "score": 9.0}],
            "config": {"enableArmorTierlist": False},
        },
    }

    responses = _run(request)

    assert responses[1]["success"] is True
    assert list(responses[1]["result"]["kinds"]) == ["weapons"]
    assert capsys.readouterr().out == ""


def test_validate_config_reports_problems() -> None:
    result = handle_validate_config({}, {
        "weaponTierOverrides": ["minecraft:iron_sword=2", "broken"],
        "armorTierOverrides": ["minecraft:iron_helmet=-3"],
        "tags": [["c:swords", "S", "c"], ["c:axes"]],
    })

    assert result["valid"] is False
    assert [p["field"] for p in result["problems"]] == [
        "weapon_tier_overrides", "armor_tier_overrides", "tags",
    ]


def test_one_shot_mode(tmp_path, capsys) -> None:
    request = tmp_path / "request.json"
    request.write_text(json.dumps({
        "items": [{"id": "minecraft:iron_sword", "kind": "weapons", "score": 9.0}],
    }), encoding="utf-8")
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"enableArmorTierlist": False}), encoding="utf-8")

    code = main(["--input", str(request), "--config", str(config), "--log-file", str(tmp_path / "run.log")])

    assert code == 0
    output = json.loads(capsys.readouterr().out)
    assert output["kinds"]["weapons"]["tiers"] == {"5": ["minecraft:iron_sword"]}
    assert (tmp_path / "run.log").exists()


def test_one_shot_config_file_layers_over_request_config(tmp_path, capsys) -> None:
    request = tmp_path / "request.json"
    request.write_text(json.dumps({
        "items": [{"id": "minecraft:iron_sword", "kind": "weapons", "score": 9.0}],
        "config": {"enableArmorTierlist": False, "tierMultiplier": 1.6},
    }), encoding="utf-8")
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"tier_multiplier": 3.0}), encoding="utf-8")

    assert main(["--input", str(request), "--config", str(config)]) == 0

    output = json.loads(capsys.readouterr().out)
    assert list(output["kinds"]) == ["weapons"]
    assert output["config"]["tier_multiplier"] == 3.0
    assert output["kinds"]["weapons"]["tiers"] == {"3": ["minecraft:iron_sword"]}
