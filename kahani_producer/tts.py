"""Speech synthesis via Gemini TTS with retry logic."""

import base64
import logging
import re
import time

from google.genai import types

from kahani_producer.client import make_client
from kahani_producer.constants import (
    CHANNELS,
    SAMPLE_RATE,
    TTS_MODEL,
    TTS_RETRY_BASE_DELAY,
    TTS_RETRY_COUNT,
)
from kahani_producer.errors import NoAudioProduced, SynthesisError
from kahani_producer.models import AudioBuffer, Segment, SpeechRequest

logger = logging.getLogger(__name__)

# Stage directions are acting notes, not dialogue: (Angry) [Silence] *sigh*
_STAGE_DIRECTION_RE = re.compile(r"\(.*?\)|\[.*?\]|\*.*?\*")
_WHITESPACE_RE = re.compile(r"\s+")


def clean_text_for_speech(text: str) -> str:
    """Strip bracketed and asterisk-delimited stage directions."""
    cleaned = _STAGE_DIRECTION_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def compose_prompt(text: str, style: str = "", modulation: str = "") -> str:
    """Build the synthesis prompt from sanitized text and delivery hints.

    Plain text is sent when there is nothing to direct. The speaker tag is
    never included.
    """
    if not style and not modulation:
        return text
    instruction = modulation or "Say the following line"
    if style:
        instruction = f"{style} {instruction}"
    return f'{instruction}: "{text}"'


def prepare_requests(segments: list[Segment], policy) -> list[SpeechRequest]:
    """Resolve voices and prompts; segments with nothing speakable are skipped."""
    requests = []
    for seg in segments:
        text = clean_text_for_speech(seg.text)
        if not text:
            logger.debug("Skipping segment with no speakable text: %r", seg.text)
            continue
        choice = policy.resolve(seg.speaker)
        prompt = compose_prompt(text, choice.style, policy.modulation(seg.speaker))
        requests.append(SpeechRequest(speaker=seg.speaker, text=text, voice=choice.voice, prompt=prompt))
    return requests


def _extract_audio(response) -> bytes:
    """Inline audio bytes from a generate_content response, or b""."""
    for candidate in response.candidates or []:
        content = candidate.content
        if content is None:
            continue
        for part in content.parts or []:
            inline = getattr(part, "inline_data", None)
            if inline is not None and inline.data:
                data = inline.data
                if isinstance(data, str):
                    data = base64.b64decode(data)
                return data
    return b""


class GeminiSynthesizer:
    """synthesize(prompt, voice) -> AudioBuffer via a single-voice Gemini TTS model."""

    def __init__(self, client=None, model: str = TTS_MODEL):
        self.client = client if client is not None else make_client()
        self.model = model

    def _speech_config(self, voice: str) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            response_modalities=["AUDIO"],
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=voice)
                )
            ),
        )

    def synthesize(self, prompt: str, voice: str) -> AudioBuffer:
        """Synthesize one prompt with retry logic.

        Retries on backend errors or empty audio payloads with exponential
        backoff, then raises SynthesisError with the last error chained.
        """
        last_error = None
        for attempt in range(TTS_RETRY_COUNT):
            try:
                response = self.client.models.generate_content(
                    model=self.model,
                    contents=prompt,
                    config=self._speech_config(voice),
                )
                buffer = AudioBuffer.from_pcm16(_extract_audio(response), SAMPLE_RATE, CHANNELS)
                if buffer.frames:
                    return buffer

                # Empty payload (or less than one frame) counts as a failure
                last_error = SynthesisError(f"TTS returned no audio for: {prompt[:50]}...")
            except Exception as e:
                last_error = e

            if attempt < TTS_RETRY_COUNT - 1:
                delay = TTS_RETRY_BASE_DELAY * (2 ** attempt)
                time.sleep(delay)

        if isinstance(last_error, SynthesisError):
            raise last_error
        raise SynthesisError(f"TTS failed with voice {voice}: {last_error}") from last_error


def synthesize_all(requests: list[SpeechRequest], synthesizer) -> list[AudioBuffer]:
    """Synthesize requests one at a time, in order.

    A failed segment is logged and left out of the result. Raises
    NoAudioProduced when nothing could be synthesized.
    """
    total = len(requests)
    buffers = []

    for i, req in enumerate(requests):
        print(f"  Generating segment {i + 1}/{total}: {req.speaker} ({req.voice})")
        try:
            buffers.append(synthesizer.synthesize(req.prompt, req.voice))
        except Exception as e:
            logger.warning("Failed to generate audio for segment %d (%s): %s", i + 1, req.speaker, e)

    if not buffers:
        raise NoAudioProduced()
    return buffers
