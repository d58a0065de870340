from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
import wave
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np


logger = logging.getLogger(__name__)

DEFAULT_CUE = "chime"
SAMPLE_RATE = 44100

_PEAK_GAIN = 0.3
_FLOOR_GAIN = 0.001


@dataclass(frozen=True)
class Tone:
    freq_hz: float
    start_s: float
    duration_s: float
    waveform: str = "sine"


@dataclass(frozen=True)
class SoundCue:
    cue_id: str
    label: str
    tones: Tuple[Tone, ...]

    @property
    def duration_s(self) -> float:
        return max((t.start_s + t.duration_s for t in self.tones), default=0.0)


CUES: Dict[str, SoundCue] = {
    "chime": SoundCue(
        cue_id="chime",
        label="Ascending chime",
        # C5, E5, G5
        tones=(Tone(523.0, 0.0, 0.15), Tone(659.0, 0.18, 0.15), Tone(784.0, 0.36, 0.25)),
    ),
    "ding": SoundCue(
        cue_id="ding",
        label="Single ding",
        tones=(Tone(880.0, 0.0, 0.4),),
    ),
    "double-beep": SoundCue(
        cue_id="double-beep",
        label="Double beep",
        tones=(Tone(1000.0, 0.0, 0.1, "square"), Tone(1000.0, 0.18, 0.1, "square")),
    ),
    "soft-bell": SoundCue(
        cue_id="soft-bell",
        label="Soft bell",
        tones=(Tone(392.0, 0.0, 0.6, "triangle"), Tone(784.0, 0.0, 0.45)),
    ),
    "alarm": SoundCue(
        cue_id="alarm",
        label="Descending alarm",
        tones=(
            Tone(988.0, 0.0, 0.12, "sawtooth"),
            Tone(784.0, 0.14, 0.12, "sawtooth"),
            Tone(988.0, 0.28, 0.12, "sawtooth"),
            Tone(784.0, 0.42, 0.12, "sawtooth"),
        ),
    ),
}


def register_cue(cue: SoundCue) -> None:
    CUES[cue.cue_id] = cue


def list_cues() -> List[str]:
    return sorted(CUES)


def _oscillator(waveform: str, phase: np.ndarray) -> np.ndarray:
    # phase in cycles
    frac = phase - np.floor(phase)
    if waveform == "sine":
        return np.sin(2.0 * np.pi * phase)
    if waveform == "square":
        return np.where(frac < 0.5, 1.0, -1.0)
    if waveform == "triangle":
        return 4.0 * np.abs(frac - 0.5) - 1.0
    if waveform == "sawtooth":
        return 2.0 * frac - 1.0
    raise ValueError(f"Unknown waveform: {waveform}")


def synthesize(cue_id: str, sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    cue = CUES[cue_id]
    total = int(np.ceil(cue.duration_s * sample_rate))
    out = np.zeros(total, dtype=np.float64)
    for tone in cue.tones:
        n = int(round(tone.duration_s * sample_rate))
        if n <= 0:
            continue
        start = int(round(tone.start_s * sample_rate))
        t = np.arange(n, dtype=np.float64) / sample_rate
        env = _PEAK_GAIN * (_FLOOR_GAIN / _PEAK_GAIN) ** (t / tone.duration_s)
        seg = _oscillator(tone.waveform, tone.freq_hz * t) * env
        end = min(total, start + n)
        out[start:end] += seg[: end - start]
    return np.clip(out, -1.0, 1.0).astype(np.float32)


def write_wav(path: Path, samples: np.ndarray, sample_rate: int = SAMPLE_RATE) -> Path:
    pcm = (np.clip(samples, -1.0, 1.0) * 32767.0).astype("<i2")
    with wave.open(str(path), "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm.tobytes())
    return path


class CuePlayer:
    """Renders cues to WAV once and plays them with paplay/aplay."""

    def __init__(self, cache_dir: Optional[Path] = None, player_cmd: Optional[List[str]] = None) -> None:
        self.cache_dir = cache_dir or (Path(tempfile.gettempdir()) / "posturecheck_cues")
        self._player_cmd = player_cmd if player_cmd is not None else self._find_player()
        self._rendered: Dict[str, Path] = {}

    @staticmethod
    def _find_player() -> Optional[List[str]]:
        for name in ("paplay", "aplay"):
            found = shutil.which(name)
            if found:
                return [found]
        return None

    @property
    def available(self) -> bool:
        return bool(self._player_cmd)

    def render(self, cue_id: str) -> Path:
        if cue_id in self._rendered and self._rendered[cue_id].exists():
            return self._rendered[cue_id]
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        path = write_wav(self.cache_dir / f"{cue_id}.wav", synthesize(cue_id))
        self._rendered[cue_id] = path
        return path

    def play_cue(self, cue_id: str) -> None:
        if cue_id not in CUES:
            logger.warning("event=play_cue unknown_cue=%s fallback=%s", cue_id, DEFAULT_CUE)
            cue_id = DEFAULT_CUE
        if not self._player_cmd:
            logger.warning("event=play_cue skipped reason=no_audio_player")
            return
        try:
            path = self.render(cue_id)
            subprocess.Popen(
                self._player_cmd + [str(path)],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except Exception as exc:
            logger.warning("event=play_cue failed cue=%s error=%s", cue_id, exc)
