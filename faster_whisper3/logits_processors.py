"""Per-step logits processing.

Each processor masks entries of the logits vector for the current position
in place. The pipeline runs them in a fixed order: the token suppression
mask first, then forced start tokens (which may override the mask), then
the begin-of-sampling suppression.
"""

from typing import List, Optional, Sequence

import torch
from torch import Tensor

from .tokens import (
    MIN_TIMESTAMP,
    SUPPRESSED_TOKEN_IDS,
    AnyToken,
    SpecialToken,
)

NEG_INF = float("-inf")

# Number of emitted tokens after which sampling begins (SOT, language, task).
SAMPLE_BEGIN = 3

# Blank (" ") token id of the Whisper BPE vocabulary.
BLANK_TOKEN_ID = 220


class LogitsProcessor:
    """Base class for logits masking rules."""

    def apply(self, logits: Tensor, step: int, num_emitted: int) -> None:
        """Mask ``logits`` in place.

        Args:
            logits: 1D logits vector of the current position (vocab_size,)
            step: Index of the current decode step (0-based)
            num_emitted: Number of tokens emitted so far, seed included
        """
        raise NotImplementedError


class SuppressTokens(LogitsProcessor):
    """Sets a fixed set of token ids to -inf at every step.

    The index tensor is built once and never changes, so one instance can
    be shared across transcriptions.
    """

    def __init__(
        self,
        vocab_size: int,
        suppress_tokens: Sequence[int] = SUPPRESSED_TOKEN_IDS,
        device: Optional[torch.device] = None,
    ):
        if vocab_size < 1:
            raise ValueError(f"vocab_size must be positive, got {vocab_size}")
        self.vocab_size = vocab_size
        # ids the model cannot produce are dropped
        self.suppress_tokens = sorted(t for t in set(suppress_tokens) if 0 <= t < vocab_size)
        self.index = torch.tensor(self.suppress_tokens, dtype=torch.long, device=device)

    def apply(self, logits: Tensor, step: int, num_emitted: int) -> None:
        index = self.index.to(logits.device)
        if logits.shape[-1] < self.vocab_size:
            # the output head is narrower than the vocabulary table
            index = index[index < logits.shape[-1]]
        logits[index] = NEG_INF


class ForceStartTokens(LogitsProcessor):
    """Forces the decoder to follow the given start tokens.

    At step ``i`` the token ``start_tokens[i + 1]`` is forced, unless it is
    ``None`` or has no real id (``Language.AUTO``), in which case the model
    chooses freely.
    """

    def __init__(self, start_tokens: Sequence[Optional[AnyToken]]):
        self.start_tokens = list(start_tokens)

    def forced_token_id(self, step: int) -> Optional[int]:
        if step + 1 >= len(self.start_tokens):
            return None
        token = self.start_tokens[step + 1]
        if token is None or token.id is None or token.id < 0:
            return None
        return token.id

    def apply(self, logits: Tensor, step: int, num_emitted: int) -> None:
        token_id = self.forced_token_id(step)
        if token_id is not None:
            logits.fill_(NEG_INF)
            logits[token_id] = 0


class SuppressAtBegin(LogitsProcessor):
    """Suppresses tokens that would end or derail decoding right after the preamble.

    Only active when exactly ``sample_begin`` tokens have been emitted:
    the blank token and EOT are suppressed, and with timestamps enabled
    also ``<|notimestamps|>`` and the 0.00 s timestamp.
    """

    def __init__(self, with_timestamps: bool, sample_begin: int = SAMPLE_BEGIN):
        self.with_timestamps = with_timestamps
        self.sample_begin = sample_begin

        self.suppress_tokens = [BLANK_TOKEN_ID, SpecialToken.END_OF_TEXT.id]
        if with_timestamps:
            self.suppress_tokens += [SpecialToken.NO_TIMESTAMPS.id, MIN_TIMESTAMP.id]

    def apply(self, logits: Tensor, step: int, num_emitted: int) -> None:
        if num_emitted != self.sample_begin:
            return
        for token_id in self.suppress_tokens:
            if token_id < logits.shape[-1]:
                logits[token_id] = NEG_INF


class LogitsProcessorPipeline:
    """Ordered list of logits processors applied once per step.

    Example:
        >>> pipeline = LogitsProcessorPipeline.for_start_tokens(suppress, start_tokens)
        >>> pipeline.apply(logits, step=0, num_emitted=1)
    """

    def __init__(self, processors: List[LogitsProcessor]):
        self.processors = processors

    @classmethod
    def for_start_tokens(
        cls,
        suppress: SuppressTokens,
        start_tokens: Sequence[Optional[AnyToken]],
    ) -> "LogitsProcessorPipeline":
        """Build the per-call pipeline for the given start tokens.

        Timestamp generation counts as enabled unless ``<|notimestamps|>``
        is one of the start tokens.
        """
        with_timestamps = not any(
            token is not None and token.id == SpecialToken.NO_TIMESTAMPS.id
            for token in start_tokens
        )
        return cls([
            suppress,
            ForceStartTokens(start_tokens),
            SuppressAtBegin(with_timestamps),
        ])

    def apply(self, logits: Tensor, step: int, num_emitted: int) -> Tensor:
        for processor in self.processors:
            processor.apply(logits, step, num_emitted)
        return logits
