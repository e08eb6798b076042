"""Parse a tagged dialogue script into speaker records."""

import re

from kahani_producer.errors import EmptyScript
from kahani_producer.models import ScriptLine

# "Speaker: text", where the tag is word characters and spaces, then a colon
_LINE_RE = re.compile(r"^\s*(\w[\w ]*?)\s*:\s*(.*)$")


def parse_lines(script: str) -> list[ScriptLine]:
    """Split a tagged script into records.

    Lines without a leading "Speaker:" continue the previous record
    (space-joined). Continuations before the first record are dropped and
    blank lines are skipped. May return an empty list.
    """
    records: list[tuple[str, list[str]]] = []

    for line in script.splitlines():
        stripped = line.strip()
        if not stripped:
            continue

        match = _LINE_RE.match(line)
        if match:
            text = match.group(2).strip()
            records.append((match.group(1).strip(), [text] if text else []))
        elif records:
            records[-1][1].append(stripped)

    return [ScriptLine(speaker=speaker, text=" ".join(parts)) for speaker, parts in records]


def parse_script(script: str) -> list[ScriptLine]:
    """Parse a tagged script, raising EmptyScript when no record is found."""
    lines = parse_lines(script)
    if not lines:
        raise EmptyScript()
    return lines


def format_script(lines: list[ScriptLine]) -> str:
    """Render records back to "Speaker: text" lines."""
    return "\n".join(f"{line.speaker}: {line.text}" for line in lines)


def list_speakers(lines: list[ScriptLine]) -> list[str]:
    """Distinct speaker tags in order of first appearance (case-insensitive)."""
    seen = set()
    speakers = []
    for line in lines:
        key = line.speaker.lower()
        if key in seen:
            continue
        seen.add(key)
        speakers.append(line.speaker)
    return speakers
