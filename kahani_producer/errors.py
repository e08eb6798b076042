"""Error taxonomy for the production pipeline."""


class KahaniError(Exception):
    """Base class for fatal pipeline failures shown to the user."""


class EmptyScript(KahaniError):
    """The tagged script contained no `Speaker: text` records."""

    def __init__(self, message: str = "Script is empty or invalid format."):
        super().__init__(message)


class TranslationFailed(KahaniError):
    """The translate backend failed or returned no script."""


class NoAudioProduced(KahaniError):
    """Every segment failed to synthesize."""

    def __init__(self, message: str = "Could not generate any audio."):
        super().__init__(message)


class SynthesisError(KahaniError):
    """A single synthesis call failed after all retries."""


class ConfigurationError(KahaniError):
    """Missing or invalid runtime configuration (API key, cast options)."""
