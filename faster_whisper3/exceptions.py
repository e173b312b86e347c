"""Exception hierarchy for faster-whisper3.

Every error raised by the package derives from ``Whisper3Error`` and from
the builtin exception that matches its nature, so callers can catch either.
"""


class Whisper3Error(Exception):
    """Base class for all faster-whisper3 errors."""


class ConfigurationError(Whisper3Error, ValueError):
    """Invalid execution environment or construction parameters."""


class ResourceLoadError(Whisper3Error, OSError):
    """Vocabulary or model data is missing or malformed."""


class InvalidTokenError(Whisper3Error, ValueError):
    """A token was constructed or looked up outside its valid range."""


class UnknownTokenId(Whisper3Error, IndexError):
    """A token id has no entry in the vocabulary table."""


class TranscriptionFailure(Whisper3Error, RuntimeError):
    """The decoding loop failed; no partial transcript is produced."""
