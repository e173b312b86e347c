"""Core data models for faster-whisper3.

This module defines the data structures passed between the decoding loop,
the result assembler and callers: the mutable per-call decoding state and
the immutable transcription result and metadata.
"""

from dataclasses import dataclass, field
from typing import List

from .tokens import Token

FINISH_EOT = "eot"
FINISH_MAX_STEPS = "max_steps"


@dataclass
class DecodingState:
    """Token ids emitted during one transcription call.

    Starts with the seed token and grows by exactly one id per decode
    step. Owned by a single call and never shared.

    Attributes:
        token_ids: Emitted token ids, seed first
        steps: Number of decode steps completed
        finish_reason: ``"eot"`` or ``"max_steps"`` once decoding stopped
    """
    token_ids: List[int] = field(default_factory=list)
    steps: int = 0
    finish_reason: str = ""

    def append(self, token_id: int):
        self.token_ids.append(token_id)

    @property
    def last_token(self) -> int:
        return self.token_ids[-1]

    def __len__(self) -> int:
        return len(self.token_ids)


@dataclass
class TranscriptionResult:
    """Decoded text of one transcription.

    Attributes:
        raw_text: Decoded text including special token markers
        text: ``raw_text`` with special token markers removed and trimmed
        tokens: Resolved tokens in emission order, up to and including EOT
    """
    raw_text: str
    text: str
    tokens: List[Token]


@dataclass
class TranscriptionInfo:
    """Metadata about the decoding process.

    Attributes:
        num_steps: Number of decoder invocations
        finish_reason: ``"eot"`` or ``"max_steps"``
        device: Device used for inference ("cpu" or "cuda")
        compute_type: Decoder precision ("float16" or "float32")
        processing_time: Wall-clock time of the decoding call in seconds
        tokens_per_second: Decode steps per wall-clock second
    """
    num_steps: int
    finish_reason: str
    device: str
    compute_type: str
    processing_time: float
    tokens_per_second: float
