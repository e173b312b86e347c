"""Shared fixtures: a synthetic Whisper v3 vocabulary and encoder output."""

import pytest
import torch

from faster_whisper3 import VocabularyTable

from tests.helpers import AUDIO_CTX, EOT, make_symbols


@pytest.fixture(scope="session")
def vocabulary():
    symbols = make_symbols()
    base = {s: i for i, s in symbols.items() if i < EOT}
    added = {s: i for i, s in symbols.items() if i >= EOT}
    return VocabularyTable.build(base, added)


@pytest.fixture
def encoder_output():
    return torch.zeros(1, AUDIO_CTX, 8)
