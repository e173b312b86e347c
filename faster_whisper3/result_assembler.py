"""Turns emitted token ids into text."""

import re
from typing import List, Optional, Sequence

from .data_models import TranscriptionResult
from .text_codec import ByteLevelTextCodec
from .tokens import SpecialToken, Token
from .vocabulary import VocabularyTable

# Markers such as <|en|>, <|transcribe|> or <|12.34|>.
SPECIAL_TOKEN_PATTERN = re.compile(r"<\|[a-z0-9.]+\|>")


class ResultAssembler:
    """Resolves token ids to symbols and decodes them to raw and clean text.

    Attributes:
        vocabulary: Table used to resolve ids
        codec: Byte-level codec used to decode symbols
    """

    def __init__(
        self,
        vocabulary: VocabularyTable,
        codec: Optional[ByteLevelTextCodec] = None,
    ):
        self.vocabulary = vocabulary
        self.codec = codec or ByteLevelTextCodec()

    def assemble(self, token_ids: Sequence[int]) -> TranscriptionResult:
        """Build the transcription result for the emitted ids.

        Tokens after the first end-of-text are dropped. Without an
        end-of-text (decoding hit the step limit) every token is kept.

        Raises:
            UnknownTokenId: If an id is not in the vocabulary
        """
        tokens: List[Token] = []
        for token_id in token_ids:
            symbol = self.vocabulary.get_symbol(token_id)
            tokens.append(Token(id=token_id, symbol=symbol))
            if symbol == SpecialToken.END_OF_TEXT.symbol:
                break

        raw_text = self.codec.decode(token.symbol for token in tokens)
        return TranscriptionResult(
            raw_text=raw_text,
            text=remove_special_tokens(raw_text),
            tokens=tokens,
        )


def remove_special_tokens(text: str) -> str:
    """Strip all ``<|...|>`` markers and surrounding whitespace."""
    return SPECIAL_TOKEN_PATTERN.sub("", text).strip()
