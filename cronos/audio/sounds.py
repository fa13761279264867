"""Cue synthesis and playback using numpy + QSoundEffect.

All cues are generated programmatically as WAV files and cached to disk
so subsequent launches are instant.

Cue names
---------
- ``start``: short rising sweep (400 → 800 Hz)
- ``tick`` : quiet falling blip for the final seconds of a block
- ``end``  : two-note triangle chord (C5 + E5) with a long decay
"""

from __future__ import annotations

import io
import wave
from pathlib import Path

import numpy as np
from loguru import logger

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from ..ports import Cue


# ── paths ────────────────────────────────────────────────────────────────

APP_SUPPORT_DIR = Path.home() / "Library" / "Application Support" / "Cronos"
SOUNDS_DIR = APP_SUPPORT_DIR / "sounds"

SAMPLE_RATE = 44100


# ═══════════════════════════════════════════════════════════════════════════
#  WAV SYNTHESIS HELPERS
# ═══════════════════════════════════════════════════════════════════════════


def _times(duration_s: float) -> np.ndarray:
    return np.linspace(0, duration_s, int(SAMPLE_RATE * duration_s), endpoint=False)


def _sweep(f_start: float, f_end: float, duration_s: float, *, exponential: bool = False) -> np.ndarray:
    """Sine whose frequency glides from *f_start* to *f_end*."""
    n = int(SAMPLE_RATE * duration_s)
    if exponential:
        freqs = np.geomspace(f_start, f_end, n)
    else:
        freqs = np.linspace(f_start, f_end, n)
    phase = 2 * np.pi * np.cumsum(freqs) / SAMPLE_RATE
    return np.sin(phase)


def _triangle(freq: float, duration_s: float) -> np.ndarray:
    t = _times(duration_s)
    return (2 / np.pi) * np.arcsin(np.sin(2 * np.pi * freq * t))


def _to_wav_bytes(samples: np.ndarray) -> bytes:
    """Convert a float64 numpy array (-1..1) to 16-bit PCM WAV bytes."""
    samples = np.clip(samples, -1.0, 1.0)
    int_samples = (samples * 32767).astype(np.int16)

    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(SAMPLE_RATE)
        wf.writeframes(int_samples.tobytes())
    return buf.getvalue()


# ═══════════════════════════════════════════════════════════════════════════
#  CUE GENERATORS
# ═══════════════════════════════════════════════════════════════════════════


def _generate_start() -> bytes:
    """Block start: 0.1 s rise to 800 Hz, held while fading over 0.3 s."""
    rise = _sweep(400.0, 800.0, 0.1)
    hold = _sweep(800.0, 800.0, 0.2)
    tone = np.concatenate([rise, hold])
    gain = np.linspace(0.3, 0.0, len(tone))
    return _to_wav_bytes(tone * gain)


def _generate_tick() -> bytes:
    """Countdown tick: 0.1 s exponential fall from 800 to 400 Hz."""
    tone = _sweep(800.0, 400.0, 0.1, exponential=True)
    gain = np.linspace(0.1, 0.0, len(tone))
    # Pad with silence so QSoundEffect doesn't clip
    return _to_wav_bytes(np.concatenate([tone * gain, np.zeros(int(SAMPLE_RATE * 0.03))]))


def _generate_end() -> bytes:
    """Block end: C5 + E5 triangle chord, 1 s exponential decay."""
    duration = 1.0
    chord = (_triangle(523.25, duration) + _triangle(659.25, duration)) * 0.5
    gain = np.geomspace(0.5, 0.01, len(chord))
    return _to_wav_bytes(chord * gain)


_GENERATORS = {
    Cue.START: _generate_start,
    Cue.TICK: _generate_tick,
    Cue.END: _generate_end,
}


# ═══════════════════════════════════════════════════════════════════════════
#  SOUND MANAGER
# ═══════════════════════════════════════════════════════════════════════════


class SoundManager(QObject):
    """Audio cue port: synthesis, caching and playback.

    Usage::

        mgr = SoundManager(parent=self)
        mgr.set_volume(70)
        mgr.play_cue(Cue.START)
    """

    def __init__(
        self,
        parent: QObject | None = None,
        *,
        sounds_dir: Path | None = None,
    ) -> None:
        super().__init__(parent)
        self._enabled = True
        self._volume = 0.7  # 0.0–1.0
        self._sounds_dir = sounds_dir or SOUNDS_DIR
        self._effects: dict[Cue, QSoundEffect] = {}

        self._ensure_wav_files()
        self._load_effects()

    # ── public API ────────────────────────────────────────────────────

    def set_volume(self, level: int) -> None:
        """Set volume (0-100).  Updates all loaded effects."""
        self._volume = max(0, min(level, 100)) / 100.0
        for effect in self._effects.values():
            effect.setVolume(self._volume)

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def play_cue(self, cue: Cue) -> None:
        """Play a cue.  No-op if disabled or the cue failed to load."""
        if not self._enabled:
            return
        effect = self._effects.get(cue)
        if effect is not None:
            effect.play()

    def wav_path(self, cue: Cue) -> Path:
        return self._sounds_dir / f"{cue.value}.wav"

    @property
    def volume(self) -> int:
        """Current volume as 0-100 integer."""
        return round(self._volume * 100)

    @property
    def enabled(self) -> bool:
        return self._enabled

    # ── internal ──────────────────────────────────────────────────────

    def _ensure_wav_files(self) -> None:
        """Generate any missing WAV files to the cache directory."""
        self._sounds_dir.mkdir(parents=True, exist_ok=True)
        for cue, gen_fn in _GENERATORS.items():
            path = self.wav_path(cue)
            if not path.exists():
                path.write_bytes(gen_fn())
                logger.debug("Generated {}", path)

    def _load_effects(self) -> None:
        """Create QSoundEffect instances from cached WAV files."""
        for cue in Cue:
            path = self.wav_path(cue)
            if path.exists():
                effect = QSoundEffect(self)
                effect.setSource(QUrl.fromLocalFile(str(path)))
                effect.setVolume(self._volume)
                self._effects[cue] = effect
