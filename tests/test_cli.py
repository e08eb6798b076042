"""Tests for CLI module (Layer 3)."""

import json
import wave
from unittest.mock import patch

import pytest

from conftest import FakeSynthesizer, FakeTranslator
from kahani_producer.cli import main
from kahani_producer.errors import TranslationFailed


# --- Helpers ---

def _create_script_file(tmp_path, name="rain.txt", content=None):
    if content is None:
        content = "Narrator: It was raining.\nHero: (Shouting) Run!\nHero: Now!\nHeroine: Wait for me!\n"
    path = tmp_path / name
    path.write_text(content)
    return str(path)


def _run(*argv):
    with patch("sys.argv", ["kahani", *argv]):
        main()


# --- render ---

def test_cli_render_writes_wav_and_manifest(tmp_path):
    script = _create_script_file(tmp_path)
    synth = FakeSynthesizer()

    with patch("kahani_producer.cli.GeminiSynthesizer", return_value=synth):
        _run("render", script, "--output-dir", str(tmp_path / "output"))

    project = tmp_path / "output" / "rain"
    with wave.open(str(project / "kahani_audiobook.wav")) as wf:
        assert wf.getnframes() == 3 * synth.frames
        assert wf.getframerate() == 24000
    manifest = json.loads((project / "output.json").read_text())
    assert manifest["stats"]["segments"] == 3
    assert manifest["casting"]["narrator"] == "Charon"


def test_cli_render_solo_custom_narrator(tmp_path):
    script = _create_script_file(tmp_path)
    synth = FakeSynthesizer()

    with patch("kahani_producer.cli.GeminiSynthesizer", return_value=synth):
        _run("render", script, "--mode", "solo", "--narrator", "Kore",
             "--output-dir", str(tmp_path / "output"))

    assert {voice for _, voice in synth.calls} == {"Kore"}
    # Hero lines get the deeper-voice hint when a female voice narrates
    assert "deeper" in synth.calls[1][0]


def test_cli_render_with_cast_file(tmp_path):
    script = _create_script_file(tmp_path)
    cast_path = tmp_path / "cast.json"
    cast_path.write_text(json.dumps({
        "characters": {"Hero": {"gender": "male", "voice": "male_elder", "personality": "tired"}}
    }))
    synth = FakeSynthesizer()

    with patch("kahani_producer.cli.GeminiSynthesizer", return_value=synth):
        _run("render", script, "--cast", str(cast_path), "--output-dir", str(tmp_path / "output"))

    hero_prompt, hero_voice = synth.calls[1]
    assert hero_voice == "Charon"
    assert "Character personality: tired." in hero_prompt


def test_cli_render_bad_hero_voice(tmp_path):
    """Hero must come from the male pool."""
    script = _create_script_file(tmp_path)
    with pytest.raises(SystemExit):
        _run("render", script, "--hero", "Kore")


def test_cli_render_missing_file(tmp_path, capsys):
    with pytest.raises(SystemExit):
        _run("render", str(tmp_path / "nope.txt"))
    assert "File not found" in capsys.readouterr().err


def test_cli_render_all_segments_fail(tmp_path, capsys):
    script = _create_script_file(tmp_path)
    synth = FakeSynthesizer(fail_on=("",))

    with patch("kahani_producer.cli.GeminiSynthesizer", return_value=synth):
        with pytest.raises(SystemExit):
            _run("render", script, "--output-dir", str(tmp_path / "output"))

    assert "Could not generate any audio." in capsys.readouterr().err
    assert not (tmp_path / "output" / "rain" / "kahani_audiobook.wav").exists()


def test_cli_render_untagged_script(tmp_path, capsys):
    script = _create_script_file(tmp_path, content="Just some prose without tags.\n")
    with patch("kahani_producer.cli.GeminiSynthesizer", return_value=FakeSynthesizer()):
        with pytest.raises(SystemExit):
            _run("render", script, "--output-dir", str(tmp_path / "output"))
    assert "Script is empty or invalid format." in capsys.readouterr().err


# --- produce / translate ---

def test_cli_produce_writes_script_and_audio(tmp_path):
    story = _create_script_file(tmp_path, "My Story.txt", "It was raining. 'Run!' he shouted.")
    translator = FakeTranslator("Narrator: Baarish ho rahi thi.\nHero: Bhaago!")

    with patch("kahani_producer.cli.GeminiTranslator", return_value=translator), \
            patch("kahani_producer.cli.GeminiSynthesizer", return_value=FakeSynthesizer()):
        _run("produce", story, "--output-dir", str(tmp_path / "output"))

    project = tmp_path / "output" / "my_story"
    assert (project / "script.txt").read_text().startswith("Narrator: Baarish")
    assert (project / "kahani_audiobook.wav").exists()
    assert translator.calls == ["It was raining. 'Run!' he shouted."]


def test_cli_produce_translation_failure(tmp_path, capsys):
    story = _create_script_file(tmp_path, "story.txt", "Once upon a time.")

    class Broken:
        def translate(self, raw_text):
            raise TranslationFailed("quota exceeded")

    with patch("kahani_producer.cli.GeminiTranslator", return_value=Broken()), \
            patch("kahani_producer.cli.GeminiSynthesizer", return_value=FakeSynthesizer()):
        with pytest.raises(SystemExit):
            _run("produce", story, "--output-dir", str(tmp_path / "output"))

    assert "quota exceeded" in capsys.readouterr().err


def test_cli_produce_keeps_script_when_audio_fails(tmp_path):
    story = _create_script_file(tmp_path, "story.txt", "Once upon a time.")
    translator = FakeTranslator("Narrator: Ek baar.\nHero: Chalo!")

    with patch("kahani_producer.cli.GeminiTranslator", return_value=translator), \
            patch("kahani_producer.cli.GeminiSynthesizer", return_value=FakeSynthesizer(fail_on=("",))):
        with pytest.raises(SystemExit):
            _run("produce", story, "--output-dir", str(tmp_path / "output"))

    project = tmp_path / "output" / "story"
    assert (project / "script.txt").read_text() == "Narrator: Ek baar.\nHero: Chalo!\n"
    assert not (project / "kahani_audiobook.wav").exists()


def test_cli_translate_to_file(tmp_path):
    story = _create_script_file(tmp_path, "story.txt", "Once upon a time.")
    out = tmp_path / "script.txt"

    with patch("kahani_producer.cli.GeminiTranslator", return_value=FakeTranslator("Narrator: Ek baar.")):
        _run("translate", story, "-o", str(out))

    assert out.read_text() == "Narrator: Ek baar.\n"


# --- cast / voices ---

def test_cli_cast_prints_json(tmp_path, capsys):
    script = _create_script_file(tmp_path, content="Narrator: Hi.\nOld Man: Hm.\nGirl_1: Yes?\n")
    _run("cast", script)

    data = json.loads(capsys.readouterr().out)
    characters = data["characters"]
    assert characters["Narrator"]["voice"] == "narrator_male"
    assert characters["Old Man"]["voice"] == "male_elder"
    assert characters["Girl_1"]["gender"] == "female"


def test_cli_cast_randomize_keeps_narrator(tmp_path, capsys):
    script = _create_script_file(tmp_path)
    _run("cast", script, "--randomize", "--seed", "7")

    characters = json.loads(capsys.readouterr().out)["characters"]
    assert characters["Narrator"]["voice"] == "narrator_male"
    assert characters["Hero"]["gender"] in ("male", "female")


def test_cli_voices_lists_pools(capsys):
    _run("voices")
    out = capsys.readouterr().out
    for name in ("Charon", "Fenrir", "Puck", "Zephyr", "Kore", "Aoede"):
        assert name in out
    assert "male_elder" in out


def test_cli_voices_filter(capsys):
    _run("voices", "--filter", "aoede")
    out = capsys.readouterr().out
    assert "Aoede" in out
    assert "Fenrir" not in out


def test_cli_no_command_prints_help(capsys):
    _run()
    assert "usage" in capsys.readouterr().out.lower()


def test_cli_translate_prints_one_record_per_line(tmp_path, capsys):
    story = _create_script_file(tmp_path, "story.txt", "Once upon a time.")
    reply = "Narrator:   Ek baar\n  ek raja tha.\nHero: Chalo!"

    with patch("kahani_producer.cli.GeminiTranslator", return_value=FakeTranslator(reply)):
        _run("translate", story)

    assert capsys.readouterr().out == "Narrator: Ek baar ek raja tha.\nHero: Chalo!\n"
