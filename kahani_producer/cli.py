"""CLI interface with subcommand routing."""

import argparse
import json
import logging
import os
import random
import sys

from kahani_producer.constants import OUTPUT_DIR, SCRIPT_FILENAME, VERSION
from kahani_producer.errors import KahaniError
from kahani_producer.exporter import export, slug_from_path
from kahani_producer.models import AudioMode, CastConfig
from kahani_producer.parser import format_script, parse_lines, parse_script
from kahani_producer.pipeline import build_manifest, produce, render_script
from kahani_producer.translate import GeminiTranslator
from kahani_producer.tts import GeminiSynthesizer
from kahani_producer.voices import (
    DEFAULT_CAST,
    FEMALE_PRESETS,
    FEMALE_VOICE_NAMES,
    MALE_PRESETS,
    MALE_VOICE_NAMES,
    NARRATOR_PRESETS,
    VOICE_LABELS,
    cast_to_dict,
    load_cast,
    randomize_cast,
    register_characters,
)

logger = logging.getLogger(__name__)


def _fail(message: str):
    print(f"Error: {message}", file=sys.stderr)
    raise SystemExit(1)


def _read_text(path: str) -> str:
    """Read an input file, exiting with an error if missing or empty."""
    if not os.path.exists(path):
        _fail(f"File not found: {path}")
    with open(path, encoding="utf-8") as f:
        text = f.read()
    if not text.strip():
        _fail(f"File is empty: {path}")
    return text


def _casting_from_args(args):
    """Per-character casting from --cast, else fixed-role casting from flags."""
    if args.cast:
        casting = load_cast(args.cast)
        if casting is None:
            _fail(f"Could not load cast file: {args.cast}")
        return casting

    mode = AudioMode.SOLO if args.mode == "solo" else AudioMode.MULTI_CAST
    cast = CastConfig(
        mode=mode,
        narrator=args.narrator or DEFAULT_CAST.narrator,
        hero=args.hero or DEFAULT_CAST.hero,
        heroine=args.heroine or DEFAULT_CAST.heroine,
    )
    if cast.hero not in MALE_VOICE_NAMES:
        _fail(f"Hero voice must be one of: {', '.join(MALE_VOICE_NAMES)}")
    if cast.heroine not in FEMALE_VOICE_NAMES:
        _fail(f"Heroine voice must be one of: {', '.join(FEMALE_VOICE_NAMES)}")
    if cast.narrator not in MALE_VOICE_NAMES + FEMALE_VOICE_NAMES:
        _fail(f"Unknown narrator voice: {cast.narrator}")
    return cast


def _print_summary(production, output_path: str):
    print(f"Synthesized {len(production.requests) - production.failed}/{len(production.requests)} segments "
          f"({production.audio.duration_seconds:.1f}s of audio)")
    if production.failed:
        print(f"Warning: {production.failed} segment(s) failed and were left out.")
    print(f"Audio written to {output_path}")


def _export_production(production, casting, project_dir: str, source: str):
    manifest = build_manifest(production, casting, source=source)
    try:
        return export(production.audio, project_dir, manifest=manifest)
    except OSError as e:
        _fail(f"Failed to write audio file: {e}")


def cmd_translate(args):
    """Translate raw text into a tagged script."""
    text = _read_text(args.file)
    try:
        script = GeminiTranslator().translate(text)
    except KahaniError as e:
        _fail(str(e))

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(script + "\n")
        print(f"Script written to {args.output}")
        return

    # Show one record per line; fall back to the raw reply if nothing is tagged
    lines = parse_lines(script)
    print(format_script(lines) if lines else script)


def cmd_cast(args):
    """Print the inferred per-character casting for a script as JSON."""
    script = _read_text(args.script)
    try:
        lines = parse_script(script)
    except KahaniError as e:
        _fail(str(e))

    existing = load_cast(args.cast) if args.cast else None
    casting = register_characters(lines, existing)
    if args.randomize:
        casting = randomize_cast(casting, random.Random(args.seed))

    print(json.dumps(cast_to_dict(casting), indent=2))


def cmd_render(args):
    """Synthesize a tagged script to WAV."""
    script = _read_text(args.script)
    casting = _casting_from_args(args)
    project_dir = os.path.join(args.output_dir, slug_from_path(args.script))

    print(f"Rendering {args.script}...")
    try:
        production = render_script(script, casting, GeminiSynthesizer())
    except KahaniError as e:
        _fail(str(e))

    output_path = _export_production(production, casting, project_dir, os.path.abspath(args.script))
    _print_summary(production, output_path)


def cmd_produce(args):
    """Translate raw text, then synthesize the resulting script."""
    text = _read_text(args.file)
    casting = _casting_from_args(args)
    project_dir = os.path.join(args.output_dir, slug_from_path(args.file))
    script_path = os.path.join(project_dir, SCRIPT_FILENAME)

    def save_script(script):
        os.makedirs(project_dir, exist_ok=True)
        with open(script_path, "w", encoding="utf-8") as f:
            f.write(script + "\n")
        print(f"Script written to {script_path}")

    print("Translating...")
    try:
        _, production = produce(text, casting, GeminiTranslator(), GeminiSynthesizer(), on_script=save_script)
    except KahaniError as e:
        _fail(str(e))

    output_path = _export_production(production, casting, project_dir, os.path.abspath(args.file))
    _print_summary(production, output_path)


def cmd_voices(args):
    """List available voices and presets."""
    filter_str = args.filter.lower() if args.filter else None

    def matches(*fields):
        return filter_str is None or any(filter_str in f.lower() for f in fields)

    rows = []
    for name in MALE_VOICE_NAMES + FEMALE_VOICE_NAMES:
        gender = "male" if name in MALE_VOICE_NAMES else "female"
        if matches(name, VOICE_LABELS[name], gender):
            rows.append(f"  {name:<18} {gender:<7} {VOICE_LABELS[name]}")
    presets = list(NARRATOR_PRESETS.values()) + MALE_PRESETS + FEMALE_PRESETS
    preset_rows = [
        f"  {p.id:<18} {p.base_voice:<7} {p.label}"
        for p in presets
        if matches(p.id, p.label, p.base_voice)
    ]

    if not rows and not preset_rows:
        print("No matching voices found.")
        return
    if rows:
        print("Fixed-role voices:")
        print("\n".join(rows))
    if preset_rows:
        print("Character presets:")
        print("\n".join(preset_rows))


def _add_casting_options(parser):
    parser.add_argument("--mode", choices=["multi", "solo"], default="multi",
                        help="Multi-cast drama or a single storyteller voice")
    parser.add_argument("--narrator", help="Narrator voice (any fixed-role voice)")
    parser.add_argument("--hero", help="Hero voice (male voice)")
    parser.add_argument("--heroine", help="Heroine voice (female voice)")
    parser.add_argument("--cast", help="Per-character casting JSON (overrides fixed roles)")
    parser.add_argument("--output-dir", default=OUTPUT_DIR, help="Base output directory")


def main(argv=None):
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="kahani",
        description="Kahani Producer: turn stories into multi-voice audio dramas",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # translate
    translate_parser = subparsers.add_parser("translate", help="Turn raw text into a tagged script")
    translate_parser.add_argument("file", help="Path to the story text file")
    translate_parser.add_argument("-o", "--output", help="Write the script to this file")
    translate_parser.set_defaults(func=cmd_translate)

    # cast
    cast_parser = subparsers.add_parser("cast", help="Show inferred per-character casting")
    cast_parser.add_argument("script", help="Path to a tagged script")
    cast_parser.add_argument("--cast", help="Existing casting JSON to extend")
    cast_parser.add_argument("--randomize", action="store_true", help="Randomize non-narrator voices")
    cast_parser.add_argument("--seed", type=int, help="Random seed for --randomize")
    cast_parser.set_defaults(func=cmd_cast)

    # render
    render_parser = subparsers.add_parser("render", help="Synthesize a tagged script to WAV")
    render_parser.add_argument("script", help="Path to a tagged script")
    _add_casting_options(render_parser)
    render_parser.set_defaults(func=cmd_render)

    # produce
    produce_parser = subparsers.add_parser("produce", help="Translate and synthesize a story")
    produce_parser.add_argument("file", help="Path to the story text file")
    _add_casting_options(produce_parser)
    produce_parser.set_defaults(func=cmd_produce)

    # voices
    voices_parser = subparsers.add_parser("voices", help="List available voices")
    voices_parser.add_argument("--filter", help="Filter voices by substring")
    voices_parser.set_defaults(func=cmd_voices)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return

    args.func(args)
