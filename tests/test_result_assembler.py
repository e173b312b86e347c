"""Tests for ResultAssembler."""

import pytest

from faster_whisper3 import (
    Language,
    ResultAssembler,
    SpecialToken,
    TimestampToken,
    Token,
    UnknownTokenId,
)
from faster_whisper3.result_assembler import remove_special_tokens

from tests.helpers import EOT, H_ID, I_ID

PREAMBLE_IDS = [
    SpecialToken.START_OF_TRANSCRIPT.id,
    Language.ENGLISH.id,
    SpecialToken.TRANSCRIBE.id,
    SpecialToken.NO_TIMESTAMPS.id,
]


class TestResultAssembler:
    """Test assembling text from token ids."""

    def test_only_special_tokens(self, vocabulary):
        """Test a result made of special tokens only."""
        assembler = ResultAssembler(vocabulary)

        result = assembler.assemble(PREAMBLE_IDS + [EOT])

        assert result.raw_text == (
            "<|startoftranscript|><|en|><|transcribe|><|notimestamps|><|endoftext|>"
        )
        assert result.text == ""
        assert [token.id for token in result.tokens] == PREAMBLE_IDS + [EOT]

    def test_text(self, vocabulary):
        """Test assembling plain text."""
        assembler = ResultAssembler(vocabulary)

        result = assembler.assemble(PREAMBLE_IDS + [H_ID, I_ID, EOT])

        assert result.text == "hi"
        assert result.tokens[4] == Token(id=H_ID, symbol="h")

    def test_tokens_after_end_of_text_are_dropped(self, vocabulary):
        """Test that tokens after end-of-text are dropped."""
        assembler = ResultAssembler(vocabulary)

        result = assembler.assemble(PREAMBLE_IDS + [H_ID, EOT, I_ID, I_ID])

        assert result.text == "h"
        assert result.tokens[-1].symbol == "<|endoftext|>"
        assert len(result.tokens) == 6

    def test_without_end_of_text_everything_is_kept(self, vocabulary):
        """Test that all tokens are kept without end-of-text."""
        assembler = ResultAssembler(vocabulary)

        result = assembler.assemble(PREAMBLE_IDS + [H_ID, I_ID, H_ID])

        assert result.text == "hih"
        assert len(result.tokens) == 7

    def test_timestamps_are_removed(self, vocabulary):
        """Test that timestamp markers stay in raw text only."""
        assembler = ResultAssembler(vocabulary)
        ids = [
            SpecialToken.START_OF_TRANSCRIPT.id,
            Language.ENGLISH.id,
            SpecialToken.TRANSCRIBE.id,
            TimestampToken.from_ms(0).id,
            H_ID,
            I_ID,
            TimestampToken.from_ms(1240).id,
            EOT,
        ]

        result = assembler.assemble(ids)

        assert "<|1.24|>" in result.raw_text
        assert result.text == "hi"

    def test_blank_token_is_decoded_and_trimmed(self, vocabulary):
        """Test that the blank token decodes to a space."""
        assembler = ResultAssembler(vocabulary)

        result = assembler.assemble(PREAMBLE_IDS + [220, H_ID, EOT])

        assert "<|notimestamps|> h<|endoftext|>" in result.raw_text
        assert result.text == "h"

    def test_unknown_id(self, vocabulary):
        """Test that an unknown id raises UnknownTokenId."""
        assembler = ResultAssembler(vocabulary)

        with pytest.raises(UnknownTokenId):
            assembler.assemble([len(vocabulary)])


class TestRemoveSpecialTokens:
    """Test stripping of special token markers."""

    @pytest.mark.parametrize("raw, expected", [
        ("<|en|> Hello", "Hello"),
        ("<|0.00|> a <|2.50|>", "a"),
        ("  plain  ", "plain"),
        ("<|Upper|>", "<|Upper|>"),
        ("<|a b|>", "<|a b|>"),
    ])
    def test_remove(self, raw, expected):
        """Test marker removal and trimming."""
        assert remove_special_tokens(raw) == expected
