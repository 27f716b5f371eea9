"""Recording limits, storage key, and the fallback sound descriptor."""

# Maximum length of a single recording session (10 minutes).
MAX_RECORDING_DURATION_MS = 10 * 60 * 1000

DEFAULT_RECORDING_NAME_PREFIX = "Recording"

# Namespaced entry holding the serialized array of all recordings.
STORAGE_KEY = "keyboardCosmicJam_recordings"
STORAGE_FILE_NAME = "recordings.json"
STORAGE_MAX_BYTES = 5 * 1024 * 1024

DEFAULT_PLAYBACK_SPEED = 1.0

# Sound descriptor synthesized for notes still held when a session is
# paused or stopped. The snapshot taken at key-down is not carried over.
DEFAULT_FLUSH_SOUND = {
    "instrument": "synthPad",
    "note": "C",
    "octave": 4,
    "frequency": 440.0,
    "volume": 0.8,
    "duration": 0.5,
    "color": "#FF00FF",
}

# MIDI export
DEFAULT_RECORDING_TEMPO = 120.0
RECORDING_TICKS_PER_BEAT = 480
MIDI_CHANNEL = 0
