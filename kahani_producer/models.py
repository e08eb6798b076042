"""Data models for script, casting, and audio buffers."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

import numpy as np


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    NEUTRAL = "neutral"


class AudioMode(str, Enum):
    MULTI_CAST = "multi_cast"
    SOLO = "solo"


@dataclass(frozen=True)
class ScriptLine:
    speaker: str       # tag exactly as written in the script
    text: str


@dataclass
class Segment:
    speaker: str       # tag of the first line merged into this segment
    text: str          # merged lines joined with PAUSE_MARKER


@dataclass(frozen=True)
class VoicePreset:
    id: str
    label: str
    base_voice: str    # prebuilt voice name sent to the TTS backend
    style: str         # default delivery hint prefixed to the prompt


@dataclass(frozen=True)
class CastConfig:
    """Fixed-role casting: narrator, hero and heroine voices plus mode."""

    mode: AudioMode
    narrator: str
    hero: str
    heroine: str


@dataclass(frozen=True)
class CharacterProfile:
    gender: Gender
    voice_id: str      # VoicePreset.id
    personality: str = ""


@dataclass(frozen=True)
class CharacterCast:
    """Per-character casting keyed by speaker tag.

    Tags keep their display form; lookups are case-insensitive through an
    index built once at construction.
    """

    characters: Mapping[str, CharacterProfile] = field(default_factory=dict)
    _index: dict = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "characters", dict(self.characters))
        index = {tag.strip().lower(): profile for tag, profile in self.characters.items()}
        object.__setattr__(self, "_index", index)

    def lookup(self, tag: str) -> CharacterProfile | None:
        return self._index.get(tag.strip().lower())

    def __contains__(self, tag: str) -> bool:
        return tag.strip().lower() in self._index

    def __len__(self) -> int:
        return len(self.characters)


@dataclass(frozen=True)
class VoiceChoice:
    voice: str
    style: str = ""


@dataclass(frozen=True)
class SpeechRequest:
    speaker: str
    text: str          # sanitized segment text
    voice: str
    prompt: str        # text actually sent to the synthesizer


@dataclass(frozen=True, eq=False)
class AudioBuffer:
    """Decoded PCM audio: float32 samples shaped (frames, channels)."""

    samples: np.ndarray
    sample_rate: int
    channels: int

    @property
    def frames(self) -> int:
        return int(self.samples.shape[0])

    @property
    def duration_seconds(self) -> float:
        return self.frames / self.sample_rate

    @classmethod
    def from_pcm16(cls, data: bytes, sample_rate: int, channels: int) -> "AudioBuffer":
        """Decode 16-bit signed little-endian interleaved PCM."""
        usable = len(data) - len(data) % (2 * channels)
        pcm = np.frombuffer(data[:usable], dtype="<i2")
        samples = (pcm.astype(np.float32) / 32768.0).reshape(-1, channels)
        return cls(samples=samples, sample_rate=sample_rate, channels=channels)

    def to_pcm16(self) -> bytes:
        """Encode to 16-bit signed little-endian interleaved PCM, clamped."""
        scaled = np.round(self.samples.astype(np.float64) * 32768.0)
        pcm = np.clip(scaled, -32768, 32767).astype("<i2")
        return pcm.tobytes()
