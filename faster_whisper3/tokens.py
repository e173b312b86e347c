"""Closed token sets of the Whisper v3 vocabulary.

Special tokens and languages are enums with fixed ids; timestamp tokens are
derived from their millisecond value. All variants expose ``id`` and
``symbol`` so they can be mixed freely in a list of start tokens.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .exceptions import InvalidTokenError


@dataclass(frozen=True)
class Token:
    """A vocabulary entry resolved from a model prediction.

    Attributes:
        id: Index of the token in the vocabulary
        symbol: Raw (byte-level encoded) string of the token
    """
    id: int
    symbol: str


class SpecialToken(Enum):
    """Control tokens that steer the Whisper v3 decoder."""

    START_OF_TRANSCRIPT = (50258, "<|startoftranscript|>")
    END_OF_TEXT = (50257, "<|endoftext|>")
    TRANSLATE = (50359, "<|translate|>")
    TRANSCRIBE = (50360, "<|transcribe|>")
    NO_TIMESTAMPS = (50364, "<|notimestamps|>")

    def __init__(self, token_id: int, symbol: str):
        self._token_id = token_id
        self._symbol = symbol

    @property
    def id(self) -> int:
        return self._token_id

    @property
    def symbol(self) -> str:
        return self._symbol


class Language(Enum):
    """Language tokens of Whisper v3.

    ``AUTO`` is not a real token: it carries no id and leaves the language
    choice to the model.
    """

    AUTO = (None, "auto", "automatic")

    AFRIKAANS = (50327, "af", "afrikaans")
    AMHARIC = (50334, "am", "amharic")
    ARABIC = (50272, "ar", "arabic")
    ASSAMESE = (50350, "as", "assamese")
    AZERBAIJANI = (50304, "az", "azerbaijani")
    BASHKIR = (50355, "ba", "bashkir")
    BELARUSIAN = (50330, "be", "belarusian")
    BULGARIAN = (50292, "bg", "bulgarian")
    BENGALI = (50302, "bn", "bengali")
    TIBETAN = (50347, "bo", "tibetan")
    BRETON = (50309, "br", "breton")
    BOSNIAN = (50315, "bs", "bosnian")
    CATALAN = (50270, "ca", "catalan")
    CZECH = (50283, "cs", "czech")
    WELSH = (50297, "cy", "welsh")
    DANISH = (50285, "da", "danish")
    GERMAN = (50261, "de", "german")
    GREEK = (50281, "el", "greek")
    ENGLISH = (50259, "en", "english")
    SPANISH = (50262, "es", "spanish")
    ESTONIAN = (50307, "et", "estonian")
    BASQUE = (50310, "eu", "basque")
    PERSIAN = (50300, "fa", "persian")
    FINNISH = (50277, "fi", "finnish")
    FAROESE = (50338, "fo", "faroese")
    FRENCH = (50265, "fr", "french")
    GALICIAN = (50319, "gl", "galician")
    GUJARATI = (50333, "gu", "gujarati")
    HAWAIIAN = (50352, "haw", "hawaiian")
    HAUSA = (50354, "ha", "hausa")
    HEBREW = (50279, "he", "hebrew")
    HINDI = (50276, "hi", "hindi")
    CROATIAN = (50291, "hr", "croatian")
    HAITIAN = (50339, "ht", "haitian")
    HUNGARIAN = (50286, "hu", "hungarian")
    ARMENIAN = (50312, "hy", "armenian")
    INDONESIAN = (50275, "id", "indonesian")
    ICELANDIC = (50311, "is", "icelandic")
    ITALIAN = (50274, "it", "italian")
    JAPANESE = (50266, "ja", "japanese")
    JAVANESE = (50356, "jw", "javanese")
    GEORGIAN = (50329, "ka", "georgian")
    KAZAKH = (50316, "kk", "kazakh")
    KHMER = (50323, "km", "khmer")
    KANNADA = (50306, "kn", "kannada")
    KOREAN = (50264, "ko", "korean")
    LATIN = (50294, "la", "latin")
    LUXEMBOURGISH = (50345, "lb", "luxembourgish")
    LINGALA = (50353, "ln", "lingala")
    LAO = (50336, "lo", "lao")
    LITHUANIAN = (50293, "lt", "lithuanian")
    LATVIAN = (50301, "lv", "latvian")
    MALAGASY = (50349, "mg", "malagasy")
    MAORI = (50295, "mi", "maori")
    MACEDONIAN = (50308, "mk", "macedonian")
    MALAYALAM = (50296, "ml", "malayalam")
    MONGOLIAN = (50314, "mn", "mongolian")
    MARATHI = (50320, "mr", "marathi")
    MALAY = (50282, "ms", "malay")
    MALTESE = (50343, "mt", "maltese")
    MYANMAR = (50346, "my", "myanmar")
    NEPALI = (50313, "ne", "nepali")
    DUTCH = (50271, "nl", "dutch")
    NYNORSK = (50342, "nn", "nynorsk")
    NORWEGIAN = (50288, "no", "norwegian")
    OCCITAN = (50328, "oc", "occitan")
    PUNJABI = (50321, "pa", "punjabi")
    POLISH = (50269, "pl", "polish")
    PASHTO = (50340, "ps", "pashto")
    PORTUGUESE = (50267, "pt", "portuguese")
    ROMANIAN = (50284, "ro", "romanian")
    RUSSIAN = (50263, "ru", "russian")
    SANSKRIT = (50344, "sa", "sanskrit")
    SINDHI = (50332, "sd", "sindhi")
    SINHALA = (50322, "si", "sinhala")
    SLOVAK = (50298, "sk", "slovak")
    SLOVENIAN = (50305, "sl", "slovenian")
    SHONA = (50324, "sn", "shona")
    SOMALI = (50326, "so", "somali")
    ALBANIAN = (50317, "sq", "albanian")
    SERBIAN = (50303, "sr", "serbian")
    SUNDANESE = (50357, "su", "sundanese")
    SWEDISH = (50273, "sv", "swedish")
    SWAHILI = (50318, "sw", "swahili")
    TAMIL = (50287, "ta", "tamil")
    TELUGU = (50299, "te", "telugu")
    TAJIK = (50331, "tg", "tajik")
    THAI = (50289, "th", "thai")
    TURKMEN = (50341, "tk", "turkmen")
    TAGALOG = (50348, "tl", "tagalog")
    TURKISH = (50268, "tr", "turkish")
    TATAR = (50351, "tt", "tatar")
    UKRAINIAN = (50280, "uk", "ukrainian")
    URDU = (50290, "ur", "urdu")
    UZBEK = (50337, "uz", "uzbek")
    VIETNAMESE = (50278, "vi", "vietnamese")
    YIDDISH = (50335, "yi", "yiddish")
    YORUBA = (50325, "yo", "yoruba")
    CANTONESE = (50358, "yue", "cantonese")
    CHINESE = (50260, "zh", "chinese")

    def __init__(self, token_id: Optional[int], iso_code: str, iso_name: str):
        self._token_id = token_id
        self.iso_code = iso_code
        self.iso_name = iso_name

    @property
    def id(self) -> Optional[int]:
        return self._token_id

    @property
    def symbol(self) -> Optional[str]:
        if self._token_id is None:
            return None
        return f"<|{self.iso_code}|>"

    @classmethod
    def from_iso_code(cls, code: str) -> "Language":
        """Look up a language by its ISO 639 code (e.g. ``"de"``)."""
        for language in cls:
            if language.iso_code == code.lower():
                return language
        raise InvalidTokenError(f"Unknown language code '{code}'")

    @classmethod
    def from_name(cls, name: str) -> "Language":
        """Look up a language by its English name (e.g. ``"german"``)."""
        for language in cls:
            if language.iso_name == name.lower():
                return language
        raise InvalidTokenError(f"Unknown language name '{name}'")


FIRST_TIMESTAMP_ID = 50365
LAST_TIMESTAMP_ID = 51865
FIRST_TIMESTAMP_MS = 0
LAST_TIMESTAMP_MS = 30_000
TIMESTAMP_STEP_MS = 20


@dataclass(frozen=True)
class TimestampToken:
    """Timestamp token covering 0-30 s in 20 ms steps.

    Use ``from_id`` or ``from_ms``; both reject values outside the valid
    range instead of clamping them.

    Attributes:
        id: Token id in ``[50365, 51865]``
    """
    id: int

    def __post_init__(self):
        if isinstance(self.id, bool) or not isinstance(self.id, int):
            raise TypeError(
                f"id must be int, got {type(self.id).__name__}"
            )
        if not FIRST_TIMESTAMP_ID <= self.id <= LAST_TIMESTAMP_ID:
            raise InvalidTokenError(
                f"Not a valid timestamp token id: {self.id}. It must be between "
                f"{FIRST_TIMESTAMP_ID} and {LAST_TIMESTAMP_ID} (inclusive)"
            )

    @classmethod
    def from_id(cls, token_id: int) -> "TimestampToken":
        return cls(token_id)

    @classmethod
    def from_ms(cls, ms: int) -> "TimestampToken":
        """Create the timestamp token for ``ms`` milliseconds.

        Raises:
            TypeError: If ms is not an integer
            InvalidTokenError: If ms is outside [0, 30000] or not a multiple of 20
        """
        if isinstance(ms, bool) or not isinstance(ms, int):
            raise TypeError(f"ms must be int, got {type(ms).__name__}")
        if not FIRST_TIMESTAMP_MS <= ms <= LAST_TIMESTAMP_MS:
            raise InvalidTokenError(
                f"Not a valid timestamp value: {ms}ms. Milliseconds must be between "
                f"{FIRST_TIMESTAMP_MS} and {LAST_TIMESTAMP_MS} (inclusive)"
            )
        if ms % TIMESTAMP_STEP_MS != 0:
            raise InvalidTokenError(
                f"Not a valid timestamp value: {ms}ms. Milliseconds must be "
                f"multiples of {TIMESTAMP_STEP_MS}"
            )
        return cls(ms // TIMESTAMP_STEP_MS + FIRST_TIMESTAMP_ID)

    @property
    def ms(self) -> int:
        return (self.id - FIRST_TIMESTAMP_ID) * TIMESTAMP_STEP_MS

    @property
    def symbol(self) -> str:
        seconds, millis = divmod(self.ms, 1000)
        # last digit is always zero
        return f"<|{seconds}.{millis // 10:02d}|>"


MIN_TIMESTAMP = TimestampToken.from_id(FIRST_TIMESTAMP_ID)
MAX_TIMESTAMP = TimestampToken.from_id(LAST_TIMESTAMP_ID)

# Anything usable as a start token.
AnyToken = Union[Token, SpecialToken, Language, TimestampToken]

# suppress_tokens from the Whisper large-v3 generation_config.json
SUPPRESSED_TOKEN_IDS = (
    1, 2, 7, 8, 9, 10, 14, 25, 26, 27, 28, 29, 31, 58, 59, 60, 61, 62, 63,
    90, 91, 92, 93, 359, 503, 522, 542, 873, 893, 902, 918, 922, 931, 1350,
    1853, 1982, 2460, 2627, 3246, 3253, 3268, 3536, 3846, 3961, 4183, 4667,
    6585, 6647, 7273, 9061, 9383, 10428, 10929, 11938, 12033, 12331, 12562,
    13793, 14157, 14635, 15265, 15618, 16553, 16604, 18362, 18956, 20075,
    21675, 22520, 26130, 26161, 26435, 28279, 29464, 31650, 32302, 32470,
    36865, 42863, 47425, 49870, 50254, 50258, 50359, 50360, 50361, 50362,
    50363,
)
