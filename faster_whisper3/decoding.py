"""Greedy autoregressive decoding loop.

The loop feeds one token per step to the decoder, masks the returned
logits, picks the highest scoring token and threads the key/value cache
produced by each step into the next one. It stops at end-of-text or after
``max_steps`` decoder calls, whichever comes first.
"""

import logging
import traceback
from typing import Callable, Optional, Sequence

import torch
from torch import Tensor

from .data_models import FINISH_EOT, FINISH_MAX_STEPS, DecodingState
from .exceptions import TranscriptionFailure
from .kv_cache import KeyValueCache, KVCacheManager
from .logits_processors import LogitsProcessorPipeline, SuppressTokens
from .tokens import AnyToken, SpecialToken

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 100

# decoder(last_token, encoder_output, *cache) -> (logits, *new_cache)
DecodeStep = Callable[..., Sequence[Tensor]]

# cross_attention_init(encoder_output) -> [k_0, v_0, k_1, v_1, ...]
CrossAttentionInit = Callable[[Tensor], Sequence[Tensor]]


class DecodingLoop:
    """Drives the decoder one token at a time.

    The loop itself holds no per-call state; every ``run`` creates its own
    DecodingState and KeyValueCache, so one instance may serve concurrent
    calls as long as the collaborators allow it.

    Attributes:
        decoder: Decoder model called once per step
        cross_attention_init: Model producing the cross-attention cache
        cache_manager: Creates and advances the key/value cache
        suppress: Token suppression mask shared by all calls
        max_steps: Hard limit on decoder calls per transcription
        end_of_text_id: Token id that ends decoding
    """

    def __init__(
        self,
        decoder: DecodeStep,
        cross_attention_init: CrossAttentionInit,
        cache_manager: KVCacheManager,
        suppress: SuppressTokens,
        max_steps: int = DEFAULT_MAX_STEPS,
        end_of_text_id: int = SpecialToken.END_OF_TEXT.id,
    ):
        if not isinstance(max_steps, int):
            raise TypeError(
                f"max_steps must be int, got {type(max_steps).__name__}"
            )
        if max_steps < 1:
            raise ValueError(
                f"max_steps must be positive integer, got {max_steps}"
            )

        self.decoder = decoder
        self.cross_attention_init = cross_attention_init
        self.cache_manager = cache_manager
        self.suppress = suppress
        self.max_steps = max_steps
        self.end_of_text_id = end_of_text_id

    @torch.inference_mode()
    def run(
        self,
        encoder_output: Tensor,
        start_tokens: Sequence[Optional[AnyToken]],
        cancel_check: Optional[Callable[[], bool]] = None,
    ) -> DecodingState:
        """Decode a token sequence for one encoded audio segment.

        Args:
            encoder_output: Output of the encoder, fixed for the call
            start_tokens: Seed token followed by tokens to force at the next
                positions; ``None`` or ``Language.AUTO`` leave a position to
                the model. Empty means ``[START_OF_TRANSCRIPT]``.
            cancel_check: Optional callable polled between steps; returning
                True aborts the call

        Returns:
            DecodingState with the emitted ids, seed included

        Raises:
            ValueError: If the seed token has no vocabulary id
            TranscriptionFailure: If any step fails or the call is cancelled
        """
        start_tokens = list(start_tokens) or [SpecialToken.START_OF_TRANSCRIPT]
        seed = start_tokens[0]
        if seed is None or seed.id is None or seed.id < 0:
            raise ValueError(f"start_tokens[0] must have a vocabulary id, got {seed!r}")

        state = DecodingState(token_ids=[seed.id])
        pipeline = LogitsProcessorPipeline.for_start_tokens(self.suppress, start_tokens)
        cache: Optional[KeyValueCache] = None

        try:
            cache = self.cache_manager.create(
                self.cache_manager.initialize(self.cross_attention_init, encoder_output)
            )

            while True:
                # between steps is the only point where state is consistent
                if cancel_check is not None and cancel_check():
                    raise TranscriptionFailure(
                        f"Transcription cancelled after {state.steps} step(s)"
                    )

                cache = self._step(state, pipeline, encoder_output, cache)

                if state.steps >= self.max_steps:
                    state.finish_reason = FINISH_MAX_STEPS
                    logger.warning(
                        f"Decoding stopped at the step limit ({self.max_steps}) "
                        f"without end-of-text"
                    )
                    break
                if state.last_token == self.end_of_text_id:
                    state.finish_reason = FINISH_EOT
                    break

        except TranscriptionFailure as e:
            # frames in the traceback still reference the step's cache tensors
            traceback.clear_frames(e.__traceback__)
            raise
        except Exception as e:
            traceback.clear_frames(e.__traceback__)
            raise TranscriptionFailure(
                f"Decoding failed at step {state.steps}: {str(e)}"
            ) from e
        finally:
            cache = None

        return state

    def _step(
        self,
        state: DecodingState,
        pipeline: LogitsProcessorPipeline,
        encoder_output: Tensor,
        cache: KeyValueCache,
    ) -> KeyValueCache:
        last_token = torch.tensor(
            [[state.last_token]],
            dtype=torch.long,
            device=self.cache_manager.device,
        )

        outputs = list(self.decoder(last_token, encoder_output, *cache.bundle()))
        if len(outputs) < 2:
            raise TranscriptionFailure(
                f"Decoder must return logits followed by the cache, got {len(outputs)} output(s)"
            )
        logits = outputs[0]

        # only the final position is used
        logits = logits.reshape(-1, logits.shape[-1])[-1].clone()
        pipeline.apply(logits, state.steps, len(state))

        # torch.argmax returns the first maximal index on ties
        token_id = int(torch.argmax(logits))
        new_cache = self.cache_manager.advance(cache, outputs[1:])

        state.append(token_id)
        state.steps += 1
        logger.debug(f"Step {state.steps - 1}: token {token_id}, cache length {new_cache.length}")
        return new_cache
