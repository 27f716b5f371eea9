"""Entry point: manage and replay stored recordings from the command line."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from PyQt6.QtCore import QCoreApplication

from . import __version__
from .core.config import ConfigManager
from .core.midi_writer import MidiWriter
from .core.recording import Recording
from .core.recording_engine import RecordingEngine

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cosmic-jam",
        description="Manage and replay recorded keyboard performances.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument(
        "--data-dir", type=Path, default=None,
        help="config and recordings directory (default: ~/.cosmic_jam)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="list stored recordings")

    p = sub.add_parser("export", help="print or write a recording as JSON")
    p.add_argument("id")
    p.add_argument("-o", "--output", type=Path, default=None)

    p = sub.add_parser("import", help="import a recording exported as JSON")
    p.add_argument("file", type=Path)

    p = sub.add_parser("rename", help="rename a recording")
    p.add_argument("id")
    p.add_argument("name")

    p = sub.add_parser("delete", help="delete a recording")
    p.add_argument("id")

    p = sub.add_parser("midi", help="save a recording as a .mid file")
    p.add_argument("id")
    p.add_argument("file", type=Path)

    p = sub.add_parser("config", help="show current settings as JSON")
    p.add_argument("--reset", action="store_true", help="restore default settings first")

    p = sub.add_parser("play", help="replay a recording, logging each note")
    p.add_argument("id")
    p.add_argument("--speed", type=float, default=None)

    return parser


def _play(
    app: QCoreApplication,
    engine: RecordingEngine,
    recording: Recording,
    speed: float | None,
) -> int:
    engine.playback_note.connect(
        lambda note: log.info("%8.0f ms  %-4s %s%d", note.timestamp, note.key,
                              note.sound_config.note, note.sound_config.octave)
    )
    engine.playback_stopped.connect(lambda _rec: app.quit())
    if not engine.play_recording(recording, speed):
        log.error("Could not start playback")
        return 1
    app.exec()
    return 0


def run(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    app.setApplicationName("Cosmic Jam")

    config = ConfigManager(config_dir=args.data_dir)

    if args.command == "config":
        if args.reset:
            config.reset()
        print(json.dumps(config.get_all(), indent=2, ensure_ascii=False))
        return 0

    engine = RecordingEngine(config=config)

    if args.command == "list":
        for rec in engine.get_recordings():
            print(f"{rec.id}\t{rec.name}\t{rec.duration / 1000:.1f}s\t{rec.note_count} notes")
        return 0

    if args.command == "import":
        try:
            text = args.file.read_text(encoding="utf-8")
        except OSError as e:
            log.error("Cannot read %s: %s", args.file, e)
            return 1
        imported = engine.import_recording(text)
        if imported is None:
            return 1
        print(imported.id)
        return 0

    if args.command == "rename":
        return 0 if engine.rename_recording(args.id, args.name) else _unknown(args.id)

    if args.command == "delete":
        return 0 if engine.delete_recording(args.id) else _unknown(args.id)

    recording = engine.get_recording(args.id)
    if recording is None:
        return _unknown(args.id)

    if args.command == "export":
        text = engine.export_recording(recording)
        if args.output is None:
            print(text)
        else:
            args.output.write_text(text, encoding="utf-8")
        return 0

    if args.command == "midi":
        tempo = recording.bpm or config.get("export.midi_tempo_bpm")
        if not MidiWriter.save(recording, args.file, tempo_bpm=tempo):
            log.error("Recording %s has no notes", args.id)
            return 1
        return 0

    return _play(app, engine, recording, args.speed)


def _unknown(recording_id: str) -> int:
    log.error("No recording with id %s", recording_id)
    return 1


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
