"""Group consecutive script lines into synthesis segments."""

from kahani_producer.constants import PAUSE_MARKER
from kahani_producer.models import ScriptLine, Segment


def build_segments(lines: list[ScriptLine], policy) -> list[Segment]:
    """Merge consecutive lines that share a voice into one segment.

    Two lines merge when `policy.group_key()` returns the same value for
    both speakers: the exact tag for multi-cast and per-character casting,
    the classified gender in solo mode. Merged text is joined with
    PAUSE_MARKER so the line boundary is still heard as a pause.
    """
    segments = []
    current = None
    current_key = None

    for line in lines:
        key = policy.group_key(line.speaker)
        if current is not None and key == current_key:
            current.text = f"{current.text}{PAUSE_MARKER}{line.text}"
            continue

        if current is not None:
            segments.append(current)
        current = Segment(speaker=line.speaker, text=line.text)
        current_key = key

    if current is not None:
        segments.append(current)

    return segments
