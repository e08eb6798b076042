"""Stitch per-segment audio buffers into one continuous buffer."""

import numpy as np

from kahani_producer.models import AudioBuffer


def concatenate(buffers: list[AudioBuffer]) -> AudioBuffer:
    """Concatenate buffers back to back, in order, into a new buffer.

    No gaps or cross-fades are inserted: pauses between segments come from
    the pause marker in the synthesized text. Inputs are left untouched.
    All buffers must share sample rate and channel count.
    """
    if not buffers:
        raise ValueError("concatenate() needs at least one buffer")

    sample_rate = buffers[0].sample_rate
    channels = buffers[0].channels
    for buf in buffers[1:]:
        if buf.sample_rate != sample_rate or buf.channels != channels:
            raise ValueError(
                f"Buffer format mismatch: {buf.sample_rate} Hz/{buf.channels} ch, "
                f"expected {sample_rate} Hz/{channels} ch"
            )

    total = sum(buf.frames for buf in buffers)
    result = np.empty((total, channels), dtype=np.float32)
    offset = 0
    for buf in buffers:
        result[offset:offset + buf.frames] = buf.samples.reshape(-1, channels)
        offset += buf.frames

    return AudioBuffer(samples=result, sample_rate=sample_rate, channels=channels)
