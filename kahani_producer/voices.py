"""Voice catalog, speaker-to-voice resolution, and character casting."""

import dataclasses
import json
import logging
import os
import random

from kahani_producer.constants import (
    DEFAULT_HERO_VOICE,
    DEFAULT_HEROINE_VOICE,
    DEFAULT_NARRATOR_VOICE,
)
from kahani_producer.models import (
    AudioMode,
    CastConfig,
    CharacterCast,
    CharacterProfile,
    Gender,
    ScriptLine,
    VoiceChoice,
    VoicePreset,
)
from kahani_producer.parser import list_speakers
from kahani_producer.speakers import classify_speaker, is_elder, is_narrator, speaker_index

logger = logging.getLogger(__name__)

# Fixed-role pools (Gemini prebuilt voices), in selection order
MALE_VOICE_NAMES = ["Charon", "Fenrir", "Puck", "Zephyr"]
FEMALE_VOICE_NAMES = ["Kore", "Aoede"]

VOICE_LABELS = {
    "Charon": "Deep/Storyteller",
    "Fenrir": "Intense/Heroic",
    "Puck": "Light/Energetic",
    "Zephyr": "Calm/Smooth",
    "Kore": "Balanced/Clear",
    "Aoede": "Expressive",
}

# Per-character presets. Regular presets rotate during casting; the elder
# preset closes each list and is only picked for age-marked tags.
_MALE_REGULAR = [
    VoicePreset("male_heroic", "Intense Lead", "Fenrir",
                "Speak with quiet intensity and conviction."),
    VoicePreset("male_energetic", "Light & Energetic", "Puck",
                "Speak in a light, quick, youthful voice."),
    VoicePreset("male_smooth", "Calm & Smooth", "Zephyr",
                "Speak in a calm, smooth and relaxed voice."),
    VoicePreset("male_gruff", "Gruff & Deep", "Charon",
                "Speak in a deep, rough, no-nonsense voice."),
]
_FEMALE_REGULAR = [
    VoicePreset("female_clear", "Balanced & Clear", "Kore",
                "Speak in a clear, warm and natural voice."),
    VoicePreset("female_expressive", "Expressive", "Aoede",
                "Speak expressively, letting emotion colour each word."),
    VoicePreset("female_soft", "Soft & Gentle", "Kore",
                "Speak softly and gently, almost intimate."),
]
ELDER_PRESETS = {
    Gender.MALE: VoicePreset("male_elder", "Wise Elder", "Charon",
                             "Speak like an old man: slow, slightly gravelly, unhurried."),
    Gender.FEMALE: VoicePreset("female_elder", "Warm Grandmother", "Aoede",
                               "Speak like an elderly woman: warm, slow and a little frail."),
}
NARRATOR_PRESETS = {
    Gender.MALE: VoicePreset("narrator_male", "Narrator (Male)", "Charon",
                             "Narrate in a grounded, cinematic storytelling tone."),
    Gender.FEMALE: VoicePreset("narrator_female", "Narrator (Female)", "Kore",
                               "Narrate in a grounded, cinematic storytelling tone."),
}

MALE_PRESETS = _MALE_REGULAR + [ELDER_PRESETS[Gender.MALE]]
FEMALE_PRESETS = _FEMALE_REGULAR + [ELDER_PRESETS[Gender.FEMALE]]

_PRESETS_BY_ID = {
    p.id: p for p in MALE_PRESETS + FEMALE_PRESETS + list(NARRATOR_PRESETS.values())
}

DEFAULT_CAST = CastConfig(
    mode=AudioMode.MULTI_CAST,
    narrator=DEFAULT_NARRATOR_VOICE,
    hero=DEFAULT_HERO_VOICE,
    heroine=DEFAULT_HEROINE_VOICE,
)


def find_preset(voice_id: str) -> VoicePreset | None:
    return _PRESETS_BY_ID.get(voice_id)


def presets_for(gender: Gender) -> list[VoicePreset]:
    """Selectable presets for a gender. NEUTRAL falls back to the male list."""
    if gender == Gender.FEMALE:
        return FEMALE_PRESETS
    return MALE_PRESETS


def voice_gender(voice: str) -> Gender:
    """Gender of a fixed-role voice name; unknown names count as female."""
    return Gender.MALE if voice in MALE_VOICE_NAMES else Gender.FEMALE


def _pick_voice(pool: list[str], used: set[str], index: int) -> str:
    """Pick from the pool, skipping voices held by the main cast when possible."""
    available = [v for v in pool if v not in used]
    if not available:
        available = list(pool)  # recycle if the main cast took everything
    return available[index % len(available)]


class FixedRolePolicy:
    """Narrator/hero/heroine casting, in multi-cast or solo mode."""

    def __init__(self, cast: CastConfig):
        self.cast = cast

    @property
    def solo(self) -> bool:
        return self.cast.mode == AudioMode.SOLO

    def resolve(self, speaker: str) -> VoiceChoice:
        """Voice for a speaker tag. Never fails; NEUTRAL tags get the narrator."""
        if self.solo:
            return VoiceChoice(self.cast.narrator)

        tag = speaker.strip().rstrip(":").lower()
        if tag == "narrator":
            return VoiceChoice(self.cast.narrator)
        if tag == "hero":
            return VoiceChoice(self.cast.hero)
        if tag == "heroine":
            return VoiceChoice(self.cast.heroine)

        used = {self.cast.narrator, self.cast.hero, self.cast.heroine}
        gender = classify_speaker(tag)
        if gender == Gender.MALE:
            return VoiceChoice(_pick_voice(MALE_VOICE_NAMES, used, speaker_index(tag)))
        if gender == Gender.FEMALE:
            return VoiceChoice(_pick_voice(FEMALE_VOICE_NAMES, used, speaker_index(tag)))

        return VoiceChoice(self.cast.narrator)

    def group_key(self, speaker: str):
        # Solo mode only needs a new call when the implied vocal gender changes
        if self.solo:
            return classify_speaker(speaker)
        return speaker

    def modulation(self, speaker: str) -> str:
        """Pitch instruction for solo lines whose gender differs from the narrator's."""
        if not self.solo:
            return ""
        line_gender = classify_speaker(speaker)
        narrator_is_male = voice_gender(self.cast.narrator) == Gender.MALE
        if line_gender == Gender.FEMALE and narrator_is_male:
            return "Say the following line in a softer, slightly higher-pitched voice to mimic a woman"
        if line_gender == Gender.MALE and not narrator_is_male:
            return "Say the following line in a deeper, rougher voice to mimic a man"
        return ""


class CharacterPolicy:
    """Explicit per-character casting from a CharacterCast."""

    def __init__(self, casting: CharacterCast):
        self.casting = casting

    def profile(self, speaker: str) -> CharacterProfile:
        """Registered profile, or the default male profile for unknown tags."""
        profile = self.casting.lookup(speaker)
        if profile is None:
            return CharacterProfile(gender=Gender.MALE, voice_id=MALE_PRESETS[0].id)
        return profile

    def resolve(self, speaker: str) -> VoiceChoice:
        profile = self.profile(speaker)
        preset = find_preset(profile.voice_id)
        if preset is None:
            logger.warning("Unknown voice preset '%s' for %s, using default", profile.voice_id, speaker)
            preset = presets_for(profile.gender)[0]
        style = preset.style
        if profile.personality.strip():
            style = f"{style} Character personality: {profile.personality.strip()}."
        return VoiceChoice(preset.base_voice, style)

    def group_key(self, speaker: str):
        return speaker

    def modulation(self, speaker: str) -> str:
        return ""


def policy_for(casting: CastConfig | CharacterCast):
    """Resolver policy for a casting configuration."""
    if isinstance(casting, CharacterCast):
        return CharacterPolicy(casting)
    if isinstance(casting, CastConfig):
        return FixedRolePolicy(casting)
    raise TypeError(f"Unsupported casting configuration: {type(casting).__name__}")


# --- Per-character casting operations ---

def _infer_profile(tag: str, rotation: dict) -> CharacterProfile:
    if is_narrator(tag):
        return CharacterProfile(gender=Gender.MALE, voice_id=NARRATOR_PRESETS[Gender.MALE].id)

    gender = classify_speaker(tag)
    if gender == Gender.NEUTRAL:
        gender = Gender.MALE

    if is_elder(tag):
        return CharacterProfile(gender=gender, voice_id=ELDER_PRESETS[gender].id)

    regular = _FEMALE_REGULAR if gender == Gender.FEMALE else _MALE_REGULAR
    preset = regular[rotation[gender] % len(regular)]
    rotation[gender] += 1
    return CharacterProfile(gender=gender, voice_id=preset.id)


def register_characters(
    lines: list[ScriptLine],
    casting: CharacterCast | None = None,
) -> CharacterCast:
    """Register every speaker in the script with an inferred default profile.

    Speakers already present in `casting` keep their (possibly user-edited)
    profile. New speakers rotate through their gender's presets in order of
    first appearance.
    """
    if casting is None:
        casting = CharacterCast()

    characters = dict(casting.characters)
    rotation = {Gender.MALE: 0, Gender.FEMALE: 0}
    for tag in list_speakers(lines):
        if tag in casting:
            continue
        characters[tag] = _infer_profile(tag, rotation)

    return CharacterCast(characters)


def _canonical_tag(casting: CharacterCast, tag: str) -> str:
    """Existing key matching `tag` case-insensitively, else `tag` itself."""
    wanted = tag.strip().lower()
    for existing in casting.characters:
        if existing.strip().lower() == wanted:
            return existing
    return tag


def _with_profile(casting: CharacterCast, tag: str, profile: CharacterProfile) -> CharacterCast:
    characters = dict(casting.characters)
    characters[_canonical_tag(casting, tag)] = profile
    return CharacterCast(characters)


def set_gender(casting: CharacterCast, tag: str, gender: Gender) -> CharacterCast:
    """Change a character's gender and reset its voice to match."""
    if gender == Gender.NEUTRAL:
        raise ValueError("Characters must be cast as male or female")

    current = CharacterPolicy(casting).profile(tag)
    if is_narrator(tag):
        voice_id = NARRATOR_PRESETS[gender].id
    else:
        voice_id = presets_for(gender)[0].id
    return _with_profile(casting, tag, dataclasses.replace(current, gender=gender, voice_id=voice_id))


def set_voice(casting: CharacterCast, tag: str, voice_id: str) -> CharacterCast:
    if find_preset(voice_id) is None:
        raise ValueError(f"Unknown voice preset: {voice_id}")
    current = CharacterPolicy(casting).profile(tag)
    return _with_profile(casting, tag, dataclasses.replace(current, voice_id=voice_id))


def set_personality(casting: CharacterCast, tag: str, personality: str) -> CharacterCast:
    current = CharacterPolicy(casting).profile(tag)
    return _with_profile(casting, tag, dataclasses.replace(current, personality=personality))


def randomize_cast(casting: CharacterCast, rng: random.Random | None = None) -> CharacterCast:
    """Random gender and preset for every non-narrator character."""
    if rng is None:
        rng = random.Random()

    characters = {}
    for tag, profile in casting.characters.items():
        if is_narrator(tag):
            characters[tag] = profile
            continue
        gender = rng.choice([Gender.MALE, Gender.FEMALE])
        preset = rng.choice(presets_for(gender))
        characters[tag] = CharacterProfile(gender=gender, voice_id=preset.id, personality="")

    return CharacterCast(characters)


def cast_to_dict(casting: CharacterCast) -> dict:
    return {
        "characters": {
            tag: {
                "gender": profile.gender.value,
                "voice": profile.voice_id,
                "personality": profile.personality,
            }
            for tag, profile in casting.characters.items()
        }
    }


def cast_from_dict(data: dict) -> CharacterCast:
    """Build a CharacterCast from JSON data, tolerating missing or null fields.

    Entries that are not objects are skipped with a warning.
    """
    characters = {}
    for tag, info in (data.get("characters") or {}).items():
        if not isinstance(info, dict):
            logger.warning("Ignoring cast entry for %s: expected an object, got %r", tag, info)
            continue
        try:
            gender = Gender(str(info.get("gender") or "male").lower())
        except ValueError:
            logger.warning("Unknown gender for %s: %r, using male", tag, info.get("gender"))
            gender = Gender.MALE
        if gender == Gender.NEUTRAL:
            gender = Gender.MALE
        voice_id = str(info.get("voice") or presets_for(gender)[0].id)
        characters[tag] = CharacterProfile(
            gender=gender,
            voice_id=voice_id,
            personality=str(info.get("personality") or ""),
        )
    return CharacterCast(characters)


def load_cast(cast_path: str) -> CharacterCast | None:
    """Load a per-character casting JSON file.

    Returns None if the file is missing or malformed.
    """
    if not os.path.exists(cast_path):
        logger.warning("Cast file not found: %s", cast_path)
        return None
    try:
        with open(cast_path) as f:
            data = json.load(f)
    except json.JSONDecodeError:
        logger.warning("Malformed cast file: %s", cast_path)
        return None
    if not isinstance(data, dict):
        logger.warning("Cast file must contain a JSON object: %s", cast_path)
        return None
    if not isinstance(data.get("characters") or {}, dict):
        logger.warning("Cast file \"characters\" must be a JSON object: %s", cast_path)
        return None
    return cast_from_dict(data)
