"""Shared fixtures for kahani producer tests."""

from types import SimpleNamespace

import numpy as np
import pytest

from kahani_producer.constants import CHANNELS, SAMPLE_RATE
from kahani_producer.models import AudioBuffer, ScriptLine


class FakeSynthesizer:
    """Records calls; returns a constant-valued buffer per call (call n → n/100)."""

    def __init__(self, frames=240, fail_on=()):
        self.frames = frames
        self.fail_on = fail_on
        self.calls = []

    def synthesize(self, prompt, voice):
        self.calls.append((prompt, voice))
        if any(marker in prompt for marker in self.fail_on):
            raise RuntimeError("backend unavailable")
        value = len(self.calls) / 100
        samples = np.full((self.frames, CHANNELS), value, dtype=np.float32)
        return AudioBuffer(samples=samples, sample_rate=SAMPLE_RATE, channels=CHANNELS)


class FakeTranslator:
    def __init__(self, script):
        self.script = script
        self.calls = []

    def translate(self, raw_text):
        self.calls.append(raw_text)
        return self.script


def make_tts_response(data):
    """Shape of a google-genai generate_content response carrying inline audio."""
    part = SimpleNamespace(inline_data=SimpleNamespace(data=data, mime_type="audio/L16;rate=24000"))
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


def make_buffer(values, sample_rate=SAMPLE_RATE, channels=CHANNELS):
    samples = np.asarray(values, dtype=np.float32).reshape(-1, channels)
    return AudioBuffer(samples=samples, sample_rate=sample_rate, channels=channels)


@pytest.fixture
def fake_synth():
    return FakeSynthesizer()


@pytest.fixture
def drama_script():
    """Tagged script used for the end-to-end scenarios."""
    return "Narrator: It was raining.\nHero: (Shouting) Run!\nHero: Now!\nHeroine: Wait for me!"


@pytest.fixture
def sample_lines():
    return [
        ScriptLine(speaker="Narrator", text="It was dark."),
        ScriptLine(speaker="Hero", text="Who's there?"),
        ScriptLine(speaker="Male_1", text="Nobody."),
        ScriptLine(speaker="Heroine", text="Run!"),
    ]
