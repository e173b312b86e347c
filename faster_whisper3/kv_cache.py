"""Key/value cache for the Whisper decoder.

Each decoder layer holds four tensors: the self-attention key and value,
which grow by one position per decode step, and the cross-attention key
and value, which are computed once from the encoder output and never
change afterwards.

The cache is passed to the decoder as one flat list ordered
``[self_k, self_v, cross_k, cross_v]`` per layer.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

import torch
from torch import Tensor

from .exceptions import TranscriptionFailure

logger = logging.getLogger(__name__)

# Position axis of a (batch, heads, length, head_dim) cache tensor.
LENGTH_DIM = 2

KeyValuePair = Tuple[Tensor, Tensor]


@dataclass(frozen=True)
class KeyValueCache:
    """Snapshot of the decoder cache between two steps.

    A new instance is produced after every step; instances are never
    modified in place.

    Attributes:
        self_attention: (key, value) per layer, grows each step
        cross_attention: (key, value) per layer, fixed for the call
    """
    self_attention: Tuple[KeyValuePair, ...]
    cross_attention: Tuple[KeyValuePair, ...]

    @property
    def num_layers(self) -> int:
        return len(self.self_attention)

    @property
    def length(self) -> int:
        """Number of positions held by the self-attention cache."""
        return self.self_attention[0][0].shape[LENGTH_DIM]

    @property
    def nbytes(self) -> int:
        return sum(
            t.element_size() * t.nelement()
            for pairs in (self.self_attention, self.cross_attention)
            for pair in pairs
            for t in pair
        )

    def bundle(self) -> List[Tensor]:
        """Flatten the cache into the decoder's input order."""
        flat = []
        for (self_k, self_v), (cross_k, cross_v) in zip(self.self_attention, self.cross_attention):
            flat.extend((self_k, self_v, cross_k, cross_v))
        return flat


class KVCacheManager:
    """Creates and advances the decoder key/value cache.

    Attributes:
        num_layers: Number of decoder layers
        num_heads: Attention heads per layer
        head_dim: Size of one attention head
        dtype: Dtype of the self-attention seed tensors
        device: Device of the self-attention seed tensors
    """

    def __init__(
        self,
        num_layers: int = 32,
        num_heads: int = 20,
        head_dim: int = 64,
        dtype: torch.dtype = torch.float16,
        device: Optional[torch.device] = None,
    ):
        for name, value in (
            ("num_layers", num_layers),
            ("num_heads", num_heads),
            ("head_dim", head_dim),
        ):
            if not isinstance(value, int):
                raise TypeError(f"{name} must be int, got {type(value).__name__}")
            if value < 1:
                raise ValueError(f"{name} must be positive integer, got {value}")

        self.num_layers = num_layers
        self.num_heads = num_heads
        self.head_dim = head_dim
        self.dtype = dtype
        self.device = device

    def initialize(
        self,
        cross_attention_init: Callable[[Tensor], Sequence[Tensor]],
        encoder_output: Tensor,
    ) -> Tuple[KeyValuePair, ...]:
        """Compute the cross-attention cache from the encoder output.

        Args:
            cross_attention_init: Model mapping the encoder output to a flat
                list ``[k_0, v_0, k_1, v_1, ...]``
            encoder_output: Output of the encoder

        Returns:
            (key, value) per decoder layer

        Raises:
            TranscriptionFailure: If the model returns the wrong number of tensors
        """
        outputs = cross_attention_init(encoder_output)
        if isinstance(outputs, Tensor):
            outputs = [outputs]
        outputs = list(outputs)
        if len(outputs) != 2 * self.num_layers:
            raise TranscriptionFailure(
                f"Cross-attention initializer returned {len(outputs)} tensors, "
                f"expected {2 * self.num_layers} ({self.num_layers} layers)"
            )
        logger.debug(f"Cross-attention cache initialized for {self.num_layers} layers")
        return tuple((outputs[2 * i], outputs[2 * i + 1]) for i in range(self.num_layers))

    def seed_self_attention(self) -> Tuple[KeyValuePair, ...]:
        """Create the empty self-attention cache (length 0) for every layer."""
        empty = torch.zeros(
            (1, self.num_heads, 0, self.head_dim),
            dtype=self.dtype,
            device=self.device,
        )
        return tuple((empty, empty) for _ in range(self.num_layers))

    def create(self, cross_attention: Tuple[KeyValuePair, ...]) -> KeyValueCache:
        return KeyValueCache(
            self_attention=self.seed_self_attention(),
            cross_attention=cross_attention,
        )

    def advance(self, cache: KeyValueCache, step_outputs: Sequence[Tensor]) -> KeyValueCache:
        """Replace the self-attention part of ``cache`` with a decode step's output.

        ``step_outputs`` is either the full flat bundle (four tensors per
        layer) or only the self-attention pairs (two per layer). Any
        cross-attention tensors in it are ignored.

        Raises:
            TranscriptionFailure: If the tensor count or the new length is wrong
        """
        step_outputs = list(step_outputs)
        if len(step_outputs) == 4 * self.num_layers:
            stride = 4
        elif len(step_outputs) == 2 * self.num_layers:
            stride = 2
        else:
            raise TranscriptionFailure(
                f"Decoder returned {len(step_outputs)} cache tensors, expected "
                f"{4 * self.num_layers} or {2 * self.num_layers} ({self.num_layers} layers)"
            )

        self_attention = tuple(
            (step_outputs[i * stride], step_outputs[i * stride + 1])
            for i in range(self.num_layers)
        )

        expected = cache.length + 1
        for layer, (key, value) in enumerate(self_attention):
            if key.shape[LENGTH_DIM] != expected or value.shape[LENGTH_DIM] != expected:
                raise TranscriptionFailure(
                    f"Self-attention cache of layer {layer} has length "
                    f"{key.shape[LENGTH_DIM]}/{value.shape[LENGTH_DIM]}, expected {expected}"
                )

        return KeyValueCache(
            self_attention=self_attention,
            cross_attention=cache.cross_attention,
        )
