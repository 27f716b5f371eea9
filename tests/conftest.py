"""Shared test fixtures."""

from __future__ import annotations

import os

import pytest

from cosmic_jam.core.recording import SoundConfig
from cosmic_jam.core.recording_store import RecordingStore
from cosmic_jam.core.storage import MemoryStorage

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


class FakeClock:
    """Manually advanced replacement for ``time.perf_counter`` (seconds)."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms / 1000.0


@pytest.fixture(scope="session")
def qapp():
    """Provide a QCoreApplication instance for the entire test session."""
    from PyQt6.QtCore import QCoreApplication

    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return RecordingStore(storage)


def _make_sound(key: str = "a", instrument: str = "piano", frequency: float = 261.63) -> SoundConfig:
    return SoundConfig(
        key=key,
        instrument=instrument,
        note="C",
        octave=4,
        frequency=frequency,
        volume=0.7,
        duration=0.5,
        color="#00FFFF",
    )


@pytest.fixture
def make_sound():
    """Factory for sound descriptors as supplied by the audio engine."""
    return _make_sound


@pytest.fixture
def sound():
    return _make_sound()
