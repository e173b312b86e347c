"""Synthetic Whisper v3 vocabulary and stub models shared by the tests."""

import torch

from faster_whisper3 import Language, SpecialToken
from faster_whisper3.tokens import FIRST_TIMESTAMP_ID, LAST_TIMESTAMP_ID, TimestampToken

VOCAB_SIZE = LAST_TIMESTAMP_ID + 1
NUM_LAYERS = 2
NUM_HEADS = 2
HEAD_DIM = 4
AUDIO_CTX = 5

EOT = SpecialToken.END_OF_TEXT.id
H_ID = 71
I_ID = 72


def make_symbols():
    """Symbol per id: 't<id>' for plain tokens, real markers for special ones."""
    symbols = {i: f"t{i}" for i in range(SpecialToken.END_OF_TEXT.id)}
    symbols[H_ID] = "h"
    symbols[I_ID] = "i"
    symbols[220] = "Ġ"
    for token in SpecialToken:
        symbols[token.id] = token.symbol
    for language in Language:
        if language.id is not None:
            symbols[language.id] = language.symbol
    for token_id in range(FIRST_TIMESTAMP_ID, LAST_TIMESTAMP_ID + 1):
        symbols[token_id] = TimestampToken.from_id(token_id).symbol
    # remaining ids between the languages and the timestamps
    for token_id in range(VOCAB_SIZE):
        symbols.setdefault(token_id, f"<|extra{token_id}|>")
    return symbols


class ScriptedDecoder:
    """Stub decoder whose logits peak at a scripted token per call.

    ``script[n]`` is the preferred token of the n-th call; once the script
    is exhausted ``default`` is preferred. The self-attention cache grows
    by one position per call, cross-attention tensors are passed through.
    """

    def __init__(self, script=(), default=EOT, vocab_size=VOCAB_SIZE, full_bundle=True):
        self.script = list(script)
        self.default = default
        self.vocab_size = vocab_size
        self.full_bundle = full_bundle
        self.calls = 0
        self.last_tokens = []
        self.self_lengths = []
        self.cross_tensors = []

    def __call__(self, last_token, encoder_output, *cache):
        self.last_tokens.append(int(last_token.item()))
        self.self_lengths.append(cache[0].shape[2])
        self.cross_tensors.append(cache[2])

        target = self.script[self.calls] if self.calls < len(self.script) else self.default
        self.calls += 1

        logits = torch.zeros(1, 1, self.vocab_size)
        logits[0, 0, target] = 10.0

        new_cache = []
        for i in range(0, len(cache), 4):
            self_k, self_v, cross_k, cross_v = cache[i:i + 4]
            position = torch.ones(1, self_k.shape[1], 1, self_k.shape[3], dtype=self_k.dtype)
            new_cache.append(torch.cat([self_k, position], dim=2))
            new_cache.append(torch.cat([self_v, position], dim=2))
            if self.full_bundle:
                new_cache.extend((cross_k, cross_v))
        return (logits, *new_cache)


def cross_attention_init(encoder_output):
    return [
        torch.zeros(1, NUM_HEADS, AUDIO_CTX, HEAD_DIM)
        for _ in range(2 * NUM_LAYERS)
    ]


def encoder(features):
    return torch.zeros(1, AUDIO_CTX, 8)
