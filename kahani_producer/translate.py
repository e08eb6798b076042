"""Adapt raw narrative text into a tagged dialogue script via Gemini."""

import logging

from google.genai import types

from kahani_producer.client import make_client
from kahani_producer.constants import SCRIPT_LANGUAGE, TRANSLATE_MODEL, TRANSLATE_TEMPERATURE
from kahani_producer.errors import TranslationFailed

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = """\
You are a professional voice director for an audio drama series.
Adapt the story below into a natural, conversational {language} script.

Tone: grounded, realistic, cinematic. Do not sound like a bedtime storyteller.

Character tags (strict). Never use character names as tags; replace them:
1. Narrator: describes the scene. Tag: Narrator
2. Male lead: Hero
3. Female lead: Heroine
4. Other male characters: Male_1, Male_2, Male_3, ...
5. Other female characters: Female_1, Female_2, Female_3, ...

Formatting (strict):
- Write each narration or dialogue turn on its own line.
- Format: Speaker_Tag: (Emotion) Dialogue text
- Example:
  Narrator: It was late at night... the road was empty.
  Hero: (Whispering) Shh... someone is coming.
  Heroine: (Scared) I'm frightened...
  Male_1: (Angry) Hey! Stop right there.

Now convert the following text:
"""


class GeminiTranslator:
    """translate(raw_text) -> tagged script, backed by a Gemini text model."""

    def __init__(self, client=None, model: str = TRANSLATE_MODEL, language: str = SCRIPT_LANGUAGE):
        self.client = client if client is not None else make_client()
        self.model = model
        self.language = language

    def translate(self, raw_text: str) -> str:
        """Return the tagged script. Raises TranslationFailed on any backend error."""
        if not raw_text.strip():
            raise TranslationFailed("Input text is empty.")

        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=raw_text,
                config=types.GenerateContentConfig(
                    system_instruction=SYSTEM_INSTRUCTION.format(language=self.language),
                    temperature=TRANSLATE_TEMPERATURE,
                ),
            )
        except Exception as e:
            logger.error("Translation error: %s", e)
            raise TranslationFailed(str(e)) from e

        script = response.text
        if not script or not script.strip():
            raise TranslationFailed("Failed to generate script")
        return script.strip()
