import json

import pytest

from courtshuffle.testing import (
    GenderMix,
    RandomSessionGenerator,
    RSGConfig,
    ScorePattern,
)
from courtshuffle.testing.__main__ import (
    COMMANDS,
    SUBCOMMANDS,
    create_completer,
    handle_line,
    run_standard_mode,
)
from courtshuffle.testing.rsg import create_small_session


@pytest.mark.parametrize("devices", [1, 2, 4])
def test_simulated_devices_converge(devices):
    config = RSGConfig(
        num_players=10,
        round_types=["mixed", "same-gender", "mixer"],
        seed=11,
        devices=devices,
    )
    result = RandomSessionGenerator(config).simulate_collaboration()

    assert result["converged"], result["divergent_keys"]
    assert result["all_finished"]
    assert result["completed_games"] == result["games"]
    assert result["connected"] == devices


@pytest.mark.parametrize("pattern", list(ScorePattern))
def test_simulation_handles_every_score_pattern(pattern):
    config = RSGConfig(
        num_players=8,
        round_types=["mixer", "mixer"],
        score_pattern=pattern,
        winning_score=21,
        seed=5,
    )
    result = RandomSessionGenerator(config).simulate_collaboration()
    assert result["converged"]


@pytest.mark.parametrize("mix", list(GenderMix))
def test_generated_sessions_validate(mix):
    config = RSGConfig(
        num_players=11, round_types=["mixed", "same-gender"], gender_mix=mix, seed=3
    )
    session = RandomSessionGenerator(config).generate_complete_session()

    assert session["validation"]["hard_violations"] == []
    assert len(session["schedule"]) == 2


def test_export_is_json():
    rsg = create_small_session(seed=1)
    exported = json.loads(rsg.export_json_format(rsg.generate_complete_session()))

    assert exported["session_config"]["round_types"] == ["mixed", "mixer"]
    assert len(exported["players"]) == 8
    assert "validation" in exported


def test_completer_accepts_slash_and_plain_commands():
    completer = create_completer()
    for command in COMMANDS:
        assert command in completer.options
        assert f"/{command}" in completer.options


def test_every_runnable_command_is_documented():
    assert set(SUBCOMMANDS) <= set(COMMANDS)


def test_generate_then_validate(tmp_path, capsys):
    output = tmp_path / "session.json"

    assert (
        run_standard_mode(
            [
                "generate",
                "--players",
                "9",
                "--round-types",
                "mixed,mixer",
                "--seed",
                "2",
                "--output",
                str(output),
            ]
        )
        == 0
    )
    assert json.loads(output.read_text(encoding="utf-8"))["schedule"]

    assert run_standard_mode(["validate", "--file", str(output), "--detailed"]) == 0
    assert "checks passed" in capsys.readouterr().out


def test_validate_missing_file(tmp_path):
    assert run_standard_mode(["validate", "--file", str(tmp_path / "nope.json")]) == 1


def test_simulate_command(capsys):
    code = run_standard_mode(
        ["simulate", "--players", "8", "--rounds", "2", "--devices", "2", "--seed", "4"]
    )
    assert code == 0
    assert "All devices hold the same scores" in capsys.readouterr().out


def test_unknown_round_type_is_reported(capsys):
    code = run_standard_mode(["generate", "--round-types", "doubles"])
    assert code == 1
    assert "Error" in capsys.readouterr().out


def test_interactive_lines(capsys):
    assert handle_line("") is True
    assert handle_line("/help generate") is True
    assert "--gender-mix" in capsys.readouterr().out
    assert handle_line("shuffle") is True
    assert "No such command" in capsys.readouterr().out
    assert handle_line("generate --players nine") is True
    assert handle_line("/exit") is False
    assert handle_line("quit") is False
