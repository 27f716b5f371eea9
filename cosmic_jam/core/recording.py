"""Recording data model — recordings, recorded notes, and playback snapshots.

Pure Python, no Qt dependency. ``to_dict`` / ``from_dict`` define the
persisted and interchange layout shared by the store and the codec.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class SoundConfig:
    """Snapshot of the sound descriptor supplied by the audio engine for a key."""

    key: str
    instrument: str
    note: str
    octave: int
    frequency: float
    volume: float
    duration: float
    color: str

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "instrument": self.instrument,
            "note": self.note,
            "octave": self.octave,
            "frequency": self.frequency,
            "volume": self.volume,
            "duration": self.duration,
            "color": self.color,
        }

    @classmethod
    def from_dict(cls, data: dict) -> SoundConfig:
        return cls(
            key=str(data.get("key", "")),
            instrument=str(data["instrument"]),
            note=str(data.get("note", "")),
            octave=int(data.get("octave", 4)),
            frequency=float(data.get("frequency", 440.0)),
            volume=float(data.get("volume", 1.0)),
            duration=float(data.get("duration", 0.0)),
            color=str(data.get("color", "")),
        )


@dataclass(frozen=True, slots=True)
class RecordedNote:
    """One held-key interval captured during recording."""

    timestamp: float           # ms since recording start when the key went down
    key: str                   # logical key identifier
    sound_config: SoundConfig  # descriptor in effect when captured
    duration: float            # ms the key was held

    @property
    def end(self) -> float:
        return self.timestamp + self.duration

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "key": self.key,
            "sound_config": self.sound_config.to_dict(),
            "duration": self.duration,
        }

    @classmethod
    def from_dict(cls, data: dict) -> RecordedNote:
        return cls(
            timestamp=float(data["timestamp"]),
            key=str(data["key"]),
            sound_config=SoundConfig.from_dict(data["sound_config"]),
            duration=float(data["duration"]),
        )


@dataclass(slots=True)
class RecordingMetadata:
    """Statistics derived from a finished recording."""

    key_count: int = 0
    instruments_used: list[str] = field(default_factory=list)
    avg_notes_per_second: float = 0.0

    @classmethod
    def from_notes(cls, notes: list[RecordedNote]) -> RecordingMetadata:
        """Derive metadata from a finished note list.

        The rate is taken over the span up to the latest note end, not over
        the recording duration, and rounded to 2 decimals.
        """
        instruments: list[str] = []
        for n in notes:
            if n.sound_config.instrument not in instruments:
                instruments.append(n.sound_config.instrument)
        key_count = len(notes)
        span = max((n.end for n in notes), default=0.0)
        rate = key_count / (span / 1000) if span > 0 else 0.0
        return cls(
            key_count=key_count,
            instruments_used=instruments,
            avg_notes_per_second=round(rate, 2),
        )

    def to_dict(self) -> dict:
        return {
            "key_count": self.key_count,
            "instruments_used": list(self.instruments_used),
            "avg_notes_per_second": self.avg_notes_per_second,
        }

    @classmethod
    def from_dict(cls, data: dict) -> RecordingMetadata:
        return cls(
            key_count=int(data.get("key_count", 0)),
            instruments_used=[str(i) for i in data.get("instruments_used", [])],
            avg_notes_per_second=float(data.get("avg_notes_per_second", 0.0)),
        )


@dataclass(slots=True)
class Recording:
    """A finalized performance capture.

    Only ``name`` is mutated after creation (via the store's rename).
    """

    id: str
    name: str
    created_at: int            # wall-clock epoch milliseconds
    duration: float = 0.0      # ms, paused intervals excluded
    notes: list[RecordedNote] = field(default_factory=list)
    bpm: float | None = None
    metadata: RecordingMetadata | None = None

    @property
    def note_count(self) -> int:
        return len(self.notes)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "created_at": self.created_at,
            "duration": self.duration,
            "notes": [n.to_dict() for n in self.notes],
            "bpm": self.bpm,
            "metadata": self.metadata.to_dict() if self.metadata is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Recording:
        """Build a Recording from its dict form.

        Raises KeyError, TypeError or ValueError on malformed input.
        """
        bpm = data.get("bpm")
        metadata = data.get("metadata")
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            created_at=int(data.get("created_at", 0)),
            duration=float(data.get("duration", 0.0)),
            notes=[RecordedNote.from_dict(n) for n in data["notes"]],
            bpm=float(bpm) if bpm is not None else None,
            metadata=RecordingMetadata.from_dict(metadata) if metadata is not None else None,
        )


@dataclass(frozen=True, slots=True)
class PlaybackState:
    """Point-in-time view of the player. Never persisted."""

    is_playing: bool = False
    current_time: float = 0.0
    total_duration: float = 0.0
    recording: Recording | None = None
    speed: float = 1.0


@dataclass(frozen=True, slots=True)
class RecordingStatus:
    """Point-in-time view of the recorder."""

    is_recording: bool = False
    is_paused: bool = False
    duration: float = 0.0
