"""Export the stitched audio as a 16-bit WAV with a provenance manifest."""

import io
import json
import os
import re

from pydub import AudioSegment

from kahani_producer.constants import MANIFEST_FILENAME, OUTPUT_FILENAME, SAMPLE_WIDTH
from kahani_producer.models import AudioBuffer


def to_audio_segment(buffer: AudioBuffer) -> AudioSegment:
    """Wrap a buffer as a pydub AudioSegment of 16-bit samples."""
    return AudioSegment(
        data=buffer.to_pcm16(),
        sample_width=SAMPLE_WIDTH,
        frame_rate=buffer.sample_rate,
        channels=buffer.channels,
    )


def encode_wav(buffer: AudioBuffer) -> bytes:
    """Serialize a buffer as a canonical PCM WAV (RIFF header, 16-bit)."""
    out = io.BytesIO()
    to_audio_segment(buffer).export(out, format="wav")
    return out.getvalue()


def slug_from_path(path: str) -> str:
    """Convert an input filename to an output directory slug.

    "Chapter 1.txt" → "chapter_1"
    """
    basename = os.path.splitext(os.path.basename(path))[0]
    slug = re.sub(r"[^a-zA-Z0-9]+", "_", basename).strip("_").lower()
    return slug or "untitled"


def export(
    buffer: AudioBuffer,
    output_dir: str,
    filename: str = OUTPUT_FILENAME,
    manifest: dict | None = None,
) -> str:
    """Write the WAV (and output.json when a manifest is given).

    Returns the path of the WAV file.
    """
    os.makedirs(output_dir, exist_ok=True)

    output_path = os.path.join(output_dir, filename)
    with open(output_path, "wb") as f:
        f.write(encode_wav(buffer))

    if manifest is not None:
        manifest_path = os.path.join(output_dir, MANIFEST_FILENAME)
        with open(manifest_path, "w") as f:
            json.dump(manifest, f, indent=2)

    return output_path
