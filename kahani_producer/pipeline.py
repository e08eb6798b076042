"""End-to-end production: tagged script → segments → speech → one buffer."""

import dataclasses
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from kahani_producer.assembly import concatenate
from kahani_producer.constants import VERSION
from kahani_producer.models import (
    AudioBuffer,
    CastConfig,
    CharacterCast,
    ScriptLine,
    Segment,
    SpeechRequest,
)
from kahani_producer.parser import parse_script
from kahani_producer.segments import build_segments
from kahani_producer.tts import prepare_requests, synthesize_all
from kahani_producer.voices import cast_to_dict, policy_for

logger = logging.getLogger(__name__)


@dataclass
class Production:
    audio: AudioBuffer
    lines: list[ScriptLine] = field(default_factory=list)
    segments: list[Segment] = field(default_factory=list)
    requests: list[SpeechRequest] = field(default_factory=list)
    failed: int = 0    # segments dropped after synthesis errors


def render_script(script: str, casting: CastConfig | CharacterCast, synthesizer) -> Production:
    """Synthesize a tagged script into one buffer.

    Raises EmptyScript if the script has no records and NoAudioProduced if
    every segment failed. Individual segment failures only shorten the
    output.
    """
    lines = parse_script(script)
    policy = policy_for(casting)
    segments = build_segments(lines, policy)
    requests = prepare_requests(segments, policy)
    logger.info("%d lines grouped into %d segments (%d speakable)", len(lines), len(segments), len(requests))

    buffers = synthesize_all(requests, synthesizer)
    failed = len(requests) - len(buffers)
    if failed:
        logger.warning("%d of %d segments failed and were left out", failed, len(requests))

    return Production(
        audio=concatenate(buffers),
        lines=lines,
        segments=segments,
        requests=requests,
        failed=failed,
    )


def produce(
    raw_text: str,
    casting: CastConfig | CharacterCast,
    translator,
    synthesizer,
    on_script=None,
) -> tuple[str, Production]:
    """Translate raw text into a tagged script, then render it.

    `on_script(script)` is called before synthesis starts, so the script
    survives a failed render.
    """
    script = translator.translate(raw_text)
    if on_script is not None:
        on_script(script)
    return script, render_script(script, casting, synthesizer)


def casting_summary(casting: CastConfig | CharacterCast) -> dict:
    if isinstance(casting, CharacterCast):
        return cast_to_dict(casting)
    summary = dataclasses.asdict(casting)
    summary["mode"] = casting.mode.value
    return summary


def build_manifest(production: Production, casting: CastConfig | CharacterCast, source: str = "") -> dict:
    """Provenance record written next to the exported audio."""
    return {
        "source": source,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "producer_version": VERSION,
        "casting": casting_summary(casting),
        "audio": {
            "sample_rate": production.audio.sample_rate,
            "channels": production.audio.channels,
            "bit_depth": 16,
        },
        "stats": {
            "lines": len(production.lines),
            "segments": len(production.segments),
            "synthesized": len(production.requests) - production.failed,
            "failed": production.failed,
            "duration_seconds": round(production.audio.duration_seconds, 1),
        },
    }
