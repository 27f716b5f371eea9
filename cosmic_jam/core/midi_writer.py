"""Save recordings as .mid files.

Converts a Recording's notes to a standard MIDI file via mido. Pitch
comes from each note's sound frequency, velocity from its volume.
"""

from __future__ import annotations

import math
from pathlib import Path

import mido

from .constants import DEFAULT_RECORDING_TEMPO, MIDI_CHANNEL, RECORDING_TICKS_PER_BEAT
from .recording import RecordedNote, Recording


def frequency_to_midi(frequency: float) -> int:
    """Nearest MIDI note number for *frequency* (A4 = 440 Hz = 69), clamped to 0-127."""
    if frequency <= 0:
        return 0
    note = round(69 + 12 * math.log2(frequency / 440.0))
    return max(0, min(127, note))


def volume_to_velocity(volume: float) -> int:
    """Map a 0.0-1.0 volume to a 1-127 note-on velocity."""
    return max(1, min(127, round(volume * 127)))


class MidiWriter:
    """Write Recordings to .mid files."""

    @staticmethod
    def note_events(notes: list[RecordedNote]) -> list[tuple[float, str, int, int]]:
        """Flatten notes into ``(seconds, type, note, velocity)`` tuples sorted by time.

        At equal times note_off sorts before note_on, so a re-triggered
        pitch is released before it sounds again.
        """
        events: list[tuple[float, str, int, int]] = []
        for n in notes:
            pitch = frequency_to_midi(n.sound_config.frequency)
            events.append((n.timestamp / 1000, "note_on", pitch, volume_to_velocity(n.sound_config.volume)))
            events.append((n.end / 1000, "note_off", pitch, 0))
        events.sort(key=lambda e: (e[0], 0 if e[1] == "note_off" else 1))
        return events

    @staticmethod
    def save(
        recording: Recording,
        file_path: str | Path,
        tempo_bpm: float | None = None,
    ) -> bool:
        """Save a recording as a Type 0 MIDI file.

        Args:
            recording: Finished Recording.
            file_path: Output .mid file path.
            tempo_bpm: Tempo in BPM; defaults to the recording's bpm, else 120.

        Returns False (and writes nothing) for a recording without notes.
        """
        if not recording.notes:
            return False
        if tempo_bpm is None:
            tempo_bpm = recording.bpm or DEFAULT_RECORDING_TEMPO

        mid = mido.MidiFile(ticks_per_beat=RECORDING_TICKS_PER_BEAT)
        track = mido.MidiTrack()
        mid.tracks.append(track)

        tempo = mido.bpm2tempo(tempo_bpm)
        track.append(mido.MetaMessage("set_tempo", tempo=tempo, time=0))
        track.append(mido.MetaMessage("track_name", name=recording.name, time=0))

        # Convert timestamps to delta ticks
        prev_tick = 0
        for seconds, event_type, note, velocity in MidiWriter.note_events(recording.notes):
            abs_tick = int(mido.second2tick(seconds, RECORDING_TICKS_PER_BEAT, tempo))
            delta = max(0, abs_tick - prev_tick)
            track.append(mido.Message(
                event_type, note=note, velocity=velocity, time=delta, channel=MIDI_CHANNEL,
            ))
            prev_tick = max(prev_tick, abs_tick)

        track.append(mido.MetaMessage("end_of_track", time=0))

        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        mid.save(str(path))
        return True
