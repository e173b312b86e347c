"""Id to symbol lookup for the Whisper v3 vocabulary.

The table is built from the base BPE vocabulary plus the added (special)
tokens, both given as ``{symbol: id}`` maps.
"""

import json
import logging
import os
from typing import Dict, List, Mapping, Optional

from .exceptions import ResourceLoadError, UnknownTokenId

logger = logging.getLogger(__name__)


class VocabularyTable:
    """Dense id -> symbol table.

    Read-only after construction, so a single instance can be shared by
    concurrent transcriptions.

    Attributes:
        symbols: Symbol per id; ``None`` marks an id no input provided
    """

    def __init__(self, symbols: List[Optional[str]]):
        self.symbols = symbols

    @classmethod
    def build(
        cls,
        base_vocab: Mapping[str, int],
        added_tokens: Mapping[str, int],
    ) -> "VocabularyTable":
        """Build the table from the base vocabulary and added tokens.

        The table is sized to the largest id + 1. Base entries are written
        first, added tokens second; an added token overwrites a base entry
        with the same id.

        Args:
            base_vocab: Base vocabulary as ``{symbol: id}``
            added_tokens: Added tokens as ``{symbol: id}``

        Returns:
            A new VocabularyTable

        Raises:
            ValueError: If an id is negative or both inputs are empty
        """
        all_ids = list(base_vocab.values()) + list(added_tokens.values())
        if not all_ids:
            raise ValueError("vocabulary cannot be empty")
        for token_id in all_ids:
            if token_id < 0:
                raise ValueError(f"token ids must be non-negative, got {token_id}")

        symbols: List[Optional[str]] = [None] * (max(all_ids) + 1)
        collisions = 0
        for source in (base_vocab, added_tokens):
            for symbol, token_id in source.items():
                if symbols[token_id] is not None:
                    collisions += 1
                symbols[token_id] = symbol

        if collisions:
            logger.warning(f"Vocabulary: {collisions} id collision(s), later entries kept")
        holes = symbols.count(None)
        if holes:
            logger.warning(f"Vocabulary: {holes} id(s) without a symbol")

        return cls(symbols)

    @classmethod
    def from_files(cls, vocab_path: str, added_tokens_path: str) -> "VocabularyTable":
        """Load the table from the ``vocab.json`` and ``added_tokens.json`` files.

        Raises:
            ResourceLoadError: If a file is missing or is not a ``{symbol: id}`` map
        """
        return cls.build(_read_token_map(vocab_path), _read_token_map(added_tokens_path))

    def get_symbol(self, token_id: int) -> str:
        """Return the symbol for ``token_id``.

        Raises:
            UnknownTokenId: If the id is outside the table or has no symbol
        """
        if not 0 <= token_id < len(self.symbols):
            raise UnknownTokenId(
                f"Token id {token_id} is outside the vocabulary [0, {len(self.symbols)})"
            )
        symbol = self.symbols[token_id]
        if symbol is None:
            raise UnknownTokenId(f"Token id {token_id} has no symbol in the vocabulary")
        return symbol

    def __len__(self) -> int:
        return len(self.symbols)


def _read_token_map(path: str) -> Dict[str, int]:
    if not os.path.exists(path):
        raise ResourceLoadError(f"Vocabulary file '{path}' not found")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ResourceLoadError(
            f"Failed to read vocabulary file '{path}'. Error: {str(e)}"
        ) from e

    if not isinstance(data, dict) or not all(
        isinstance(k, str) and isinstance(v, int) and not isinstance(v, bool)
        for k, v in data.items()
    ):
        raise ResourceLoadError(
            f"Vocabulary file '{path}' must contain a JSON object mapping symbols to ids"
        )
    return data
