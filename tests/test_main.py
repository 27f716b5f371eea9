"""Tests for the command-line entry point."""

from __future__ import annotations

import json

import mido
import pytest

from cosmic_jam.core.config import ConfigManager
from cosmic_jam.core.recording_engine import RecordingEngine
from cosmic_jam.main import build_parser, run


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def seeded(qapp, data_dir, clock, sound):
    """A recording stored in *data_dir* through the default file storage."""
    engine = RecordingEngine(config=ConfigManager(config_dir=data_dir), clock=clock)
    engine.start_recording("Seeded")
    engine.note_start("a", sound)
    clock.advance(80)
    engine.note_end("a", sound)
    clock.advance(20)
    return engine.stop_recording()


def _cli(data_dir, *args):
    return run(["--data-dir", str(data_dir), *args])


class TestParser:
    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_play_speed(self):
        args = build_parser().parse_args(["play", "r1", "--speed", "2"])
        assert args.speed == 2.0


class TestCommands:
    def test_list(self, data_dir, seeded, capsys):
        assert _cli(data_dir, "list") == 0
        out = capsys.readouterr().out
        assert seeded.id in out
        assert "Seeded" in out
        assert "1 notes" in out

    def test_export_to_stdout(self, data_dir, seeded, capsys):
        assert _cli(data_dir, "export", seeded.id) == 0
        assert json.loads(capsys.readouterr().out)["id"] == seeded.id

    def test_export_import_file(self, data_dir, seeded, tmp_path, capsys):
        out_file = tmp_path / "take.json"
        assert _cli(data_dir, "export", seeded.id, "-o", str(out_file)) == 0
        assert _cli(data_dir, "import", str(out_file)) == 0
        new_id = capsys.readouterr().out.strip()
        assert new_id and new_id != seeded.id

        _cli(data_dir, "list")
        assert capsys.readouterr().out.count("Seeded") == 2

    def test_import_invalid(self, qapp, data_dir, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("{}", encoding="utf-8")
        assert _cli(data_dir, "import", str(bad)) == 1

    def test_import_missing_file(self, qapp, data_dir, tmp_path):
        assert _cli(data_dir, "import", str(tmp_path / "nope.json")) == 1

    def test_rename_and_delete(self, data_dir, seeded, capsys):
        assert _cli(data_dir, "rename", seeded.id, "Renamed") == 0
        _cli(data_dir, "list")
        assert "Renamed" in capsys.readouterr().out
        assert _cli(data_dir, "delete", seeded.id) == 0
        assert _cli(data_dir, "delete", seeded.id) == 1

    def test_unknown_id(self, qapp, data_dir):
        assert _cli(data_dir, "export", "missing") == 1
        assert _cli(data_dir, "rename", "missing", "x") == 1

    def test_midi(self, data_dir, seeded, tmp_path):
        path = tmp_path / "take.mid"
        assert _cli(data_dir, "midi", seeded.id, str(path)) == 0
        notes = [m for m in mido.MidiFile(str(path)).tracks[0] if m.type == "note_on"]
        assert len(notes) == 1

    def test_play_returns_after_playback(self, data_dir, seeded):
        assert _cli(data_dir, "play", seeded.id, "--speed", "4") == 0

    def test_config_shows_settings(self, qapp, data_dir, capsys):
        assert _cli(data_dir, "config") == 0
        shown = json.loads(capsys.readouterr().out)
        assert shown["storage"]["file"] == "recordings.json"

    def test_config_reset(self, qapp, data_dir, capsys):
        ConfigManager(config_dir=data_dir).set("playback.default_speed", 3.0)
        assert _cli(data_dir, "config", "--reset") == 0
        assert json.loads(capsys.readouterr().out)["playback"]["default_speed"] == 1.0
        assert ConfigManager(config_dir=data_dir).get("playback.default_speed") == 1.0
