"""All magic numbers and configuration constants."""

SAMPLE_RATE = 24000                 # Hz, Gemini TTS returns 24 kHz PCM
CHANNELS = 1                        # mono
SAMPLE_WIDTH = 2                    # bytes, 16-bit signed little-endian
PAUSE_MARKER = " ... "              # spoken pause between merged script lines
TTS_MODEL = "gemini-2.5-flash-preview-tts"
TRANSLATE_MODEL = "gemini-2.5-flash"
TRANSLATE_TEMPERATURE = 0.6
SCRIPT_LANGUAGE = "Hinglish"          # target language of the dialogue script
TTS_RETRY_COUNT = 3                 # max attempts per synthesis segment
TTS_RETRY_BASE_DELAY = 1.0          # seconds, base delay for exponential backoff
API_KEY_ENV_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY")
DEFAULT_NARRATOR_VOICE = "Charon"    # deep storyteller
DEFAULT_HERO_VOICE = "Fenrir"        # intense, heroic
DEFAULT_HEROINE_VOICE = "Kore"       # balanced, clear
NARRATOR_TAG = "narrator"
OUTPUT_DIR = "output"
OUTPUT_FILENAME = "kahani_audiobook.wav"
SCRIPT_FILENAME = "script.txt"
MANIFEST_FILENAME = "output.json"
VERSION = "0.1.0"
