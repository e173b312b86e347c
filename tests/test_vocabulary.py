"""Tests for VocabularyTable."""

import json

import pytest

from faster_whisper3 import ResourceLoadError, UnknownTokenId, VocabularyTable


class TestVocabularyBuild:
    """Test building the table from symbol maps."""

    def test_build_and_lookup(self):
        """Test building the table and looking up symbols."""
        base = {"a": 0, "b": 1, "c": 2}
        added = {"<|x|>": 3}
        table = VocabularyTable.build(base, added)

        assert len(table) == 4
        for symbol, token_id in {**base, **added}.items():
            assert table.get_symbol(token_id) == symbol

    def test_added_tokens_overwrite_base(self):
        """Test that added tokens overwrite base entries."""
        table = VocabularyTable.build({"a": 0, "b": 1}, {"<|b|>": 1})

        assert len(table) == 2
        assert table.get_symbol(1) == "<|b|>"

    def test_rebuild_is_idempotent(self):
        """Test that rebuilding from the same input gives the same table."""
        base = {"a": 0, "b": 1}
        added = {"<|c|>": 2}

        first = VocabularyTable.build(base, added)
        second = VocabularyTable.build(base, added)

        assert first.symbols == second.symbols

    def test_sized_to_max_id(self):
        """Test that the table is sized to the largest id."""
        table = VocabularyTable.build({"a": 0}, {"<|z|>": 9})
        assert len(table) == 10

    def test_hole_has_no_symbol(self):
        """Test that an id without symbol raises UnknownTokenId."""
        table = VocabularyTable.build({"a": 0}, {"<|z|>": 2})

        with pytest.raises(UnknownTokenId, match="has no symbol"):
            table.get_symbol(1)

    @pytest.mark.parametrize("token_id", [-1, 3, 100])
    def test_out_of_range(self, token_id):
        """Test that out-of-range ids raise UnknownTokenId."""
        table = VocabularyTable.build({"a": 0, "b": 1, "c": 2}, {})

        with pytest.raises(UnknownTokenId, match="outside the vocabulary"):
            table.get_symbol(token_id)

    def test_empty_vocabulary(self):
        """Test that an empty vocabulary raises ValueError."""
        with pytest.raises(ValueError, match="vocabulary cannot be empty"):
            VocabularyTable.build({}, {})

    def test_negative_id(self):
        """Test that negative ids raise ValueError."""
        with pytest.raises(ValueError, match="token ids must be non-negative"):
            VocabularyTable.build({"a": -1}, {})


class TestVocabularyFromFiles:
    """Test loading the table from JSON files."""

    def test_from_files(self, tmp_path):
        """Test loading from vocabulary files."""
        vocab_path = tmp_path / "vocab.json"
        added_path = tmp_path / "added_tokens.json"
        vocab_path.write_text(json.dumps({"a": 0, "Ġb": 1}), encoding="utf-8")
        added_path.write_text(json.dumps({"<|endoftext|>": 2}), encoding="utf-8")

        table = VocabularyTable.from_files(str(vocab_path), str(added_path))

        assert len(table) == 3
        assert table.get_symbol(1) == "Ġb"
        assert table.get_symbol(2) == "<|endoftext|>"

    def test_missing_file(self, tmp_path):
        """Test that a missing file raises ResourceLoadError."""
        added_path = tmp_path / "added_tokens.json"
        added_path.write_text("{}", encoding="utf-8")

        with pytest.raises(ResourceLoadError, match="not found"):
            VocabularyTable.from_files(str(tmp_path / "missing.json"), str(added_path))

    def test_invalid_json(self, tmp_path):
        """Test that invalid JSON raises ResourceLoadError."""
        vocab_path = tmp_path / "vocab.json"
        vocab_path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ResourceLoadError, match="Failed to read"):
            VocabularyTable.from_files(str(vocab_path), str(vocab_path))

    def test_wrong_structure(self, tmp_path):
        """Test that a non-mapping file raises ResourceLoadError."""
        vocab_path = tmp_path / "vocab.json"
        vocab_path.write_text(json.dumps(["a", "b"]), encoding="utf-8")

        with pytest.raises(ResourceLoadError, match="must contain a JSON object"):
            VocabularyTable.from_files(str(vocab_path), str(vocab_path))
