"""Main API class for faster-whisper3.

This module provides the FastWhisper3 class, which is the primary interface
for using faster-whisper3. It validates the execution environment, wires the
decoding components together and runs one transcription per call.
"""

import logging
import os
import time
from typing import Callable, List, Optional, Sequence, Tuple, Union

import numpy as np
import torch
from torch import Tensor

from .data_models import TranscriptionInfo, TranscriptionResult
from .decoding import DEFAULT_MAX_STEPS, CrossAttentionInit, DecodeStep, DecodingLoop
from .exceptions import (
    ConfigurationError,
    InvalidTokenError,
    ResourceLoadError,
    TranscriptionFailure,
    UnknownTokenId,
)
from .kv_cache import KVCacheManager
from .logits_processors import SuppressTokens
from .profiler import PerformanceProfiler, cuda_memory_manager
from .result_assembler import ResultAssembler
from .tokens import AnyToken, Language, SpecialToken
from .vocabulary import VocabularyTable

logger = logging.getLogger(__name__)

RESOURCE_VOCAB = "whisper_v3_vocab.json"
RESOURCE_ADDED_TOKENS = "whisper_v3_added_tokens.json"
RESOURCE_ENCODER = "whisper_v3_encoder.pt"
RESOURCE_DECODER = "whisper_v3_decoder.pt"
RESOURCE_DECODER_CROSS_ATTENTION_INIT = "whisper_v3_decoder_cross_attention_initializer.pt"

TASKS = {
    "transcribe": SpecialToken.TRANSCRIBE,
    "translate": SpecialToken.TRANSLATE,
}

COMPUTE_DTYPES = {
    "float16": torch.float16,
    "float32": torch.float32,
}


def _validate_environment(device: str, compute_type: str):
    if not isinstance(device, str):
        raise TypeError(
            f"device must be str, got {type(device).__name__}"
        )
    if device not in ["cuda", "cpu"]:
        raise ConfigurationError(
            f"device must be 'cuda' or 'cpu', got '{device}'"
        )
    if device == "cuda" and not torch.cuda.is_available():
        raise ConfigurationError(
            "CUDA device requested but not available. "
            "Install CUDA toolkit or use device='cpu'"
        )

    if not isinstance(compute_type, str):
        raise TypeError(
            f"compute_type must be str, got {type(compute_type).__name__}"
        )
    if compute_type not in COMPUTE_DTYPES:
        raise ConfigurationError(
            f"compute_type must be 'float16' or 'float32', got '{compute_type}'"
        )


class FastWhisper3:
    """Greedy Whisper v3 transcription on top of exported encoder/decoder models.

    The models are opaque callables: any ``torch.nn.Module``, TorchScript
    module or plain function with the right signature works.

    Example:
        >>> model = FastWhisper3.load("/models/whisper-v3", device="cuda")
        >>> result, info = model.transcribe_features(mel, language="de")
        >>> print(result.text)

    Attributes:
        encoder: Encoder model, ``features -> encoder_output``
        decoder: Decoder model, ``(last_token, encoder_output, *cache) -> (logits, *cache)``
        cross_attention_init: Model producing the cross-attention cache
        vocabulary: Vocabulary table shared by all calls
        device: Device being used for inference
        compute_type: Precision of the decoder tensors
        max_steps: Maximum number of decoder calls per transcription
    """

    def __init__(
        self,
        encoder: Optional[Callable[[Tensor], Tensor]],
        decoder: DecodeStep,
        cross_attention_init: CrossAttentionInit,
        vocabulary: VocabularyTable,
        device: str = "cuda",
        compute_type: str = "float16",
        max_steps: int = DEFAULT_MAX_STEPS,
        num_layers: int = 32,
        num_heads: int = 20,
        head_dim: int = 64,
    ):
        """Initialize faster-whisper3.

        Args:
            encoder: Encoder model; may be None when only precomputed
                encoder outputs are transcribed
            decoder: Decoder model called once per step
            cross_attention_init: Model mapping the encoder output to the
                flat cross-attention cache
            vocabulary: Vocabulary table
            device: Device to run on ("cuda" or "cpu")
            compute_type: Precision ("float16" or "float32")
            max_steps: Maximum number of decoder calls per transcription
            num_layers: Number of decoder layers
            num_heads: Attention heads per decoder layer
            head_dim: Size of one attention head

        Raises:
            ConfigurationError: If device or compute_type is invalid or
                CUDA is requested but not available
            TypeError: If parameters have invalid types
            ValueError: If parameters have invalid values
        """
        _validate_environment(device, compute_type)

        if not isinstance(vocabulary, VocabularyTable):
            raise TypeError(
                f"vocabulary must be VocabularyTable, got {type(vocabulary).__name__}"
            )

        self.encoder = encoder
        self.decoder = decoder
        self.cross_attention_init = cross_attention_init
        self.vocabulary = vocabulary
        self.device = device
        self.compute_type = compute_type
        self.max_steps = max_steps

        self._device = torch.device(device)
        self._dtype = COMPUTE_DTYPES[compute_type]

        self.cache_manager = KVCacheManager(
            num_layers=num_layers,
            num_heads=num_heads,
            head_dim=head_dim,
            dtype=self._dtype,
            device=self._device,
        )
        self.suppress = SuppressTokens(len(vocabulary), device=self._device)
        self.decoding_loop = DecodingLoop(
            decoder=decoder,
            cross_attention_init=cross_attention_init,
            cache_manager=self.cache_manager,
            suppress=self.suppress,
            max_steps=max_steps,
        )
        self.result_assembler = ResultAssembler(vocabulary)

        logger.info(
            f"FastWhisper3 initialized: device={device}, "
            f"compute_type={compute_type}, vocab_size={len(vocabulary)}, "
            f"max_steps={max_steps}"
        )

    @classmethod
    def load(
        cls,
        model_dir: str,
        device: str = "cuda",
        compute_type: str = "float16",
        **kwargs,
    ) -> "FastWhisper3":
        """Load exported TorchScript models and vocabulary from ``model_dir``.

        The directory must contain the encoder, decoder and cross-attention
        initializer ``.pt`` files and the two vocabulary JSON files.

        Raises:
            ResourceLoadError: If a file is missing or cannot be loaded
            ConfigurationError: If device or compute_type is invalid
        """
        _validate_environment(device, compute_type)

        if not os.path.isdir(model_dir):
            raise ResourceLoadError(
                f"Model directory '{model_dir}' not found. Check the path and permissions"
            )

        logger.info(f"Loading Whisper v3 from '{model_dir}' on device '{device}'")

        vocabulary = VocabularyTable.from_files(
            os.path.join(model_dir, RESOURCE_VOCAB),
            os.path.join(model_dir, RESOURCE_ADDED_TOKENS),
        )

        models = []
        for name in (RESOURCE_ENCODER, RESOURCE_DECODER, RESOURCE_DECODER_CROSS_ATTENTION_INIT):
            path = os.path.join(model_dir, name)
            if not os.path.exists(path):
                raise ResourceLoadError(f"Model file '{path}' not found")
            try:
                model = torch.jit.load(path, map_location=device)
            except Exception as e:
                raise ResourceLoadError(
                    f"Failed to load model file '{path}'. Error: {str(e)}"
                ) from e
            model.eval()
            models.append(model)

        encoder, decoder, cross_attention_init = models
        return cls(
            encoder=encoder,
            decoder=decoder,
            cross_attention_init=cross_attention_init,
            vocabulary=vocabulary,
            device=device,
            compute_type=compute_type,
            **kwargs,
        )

    @staticmethod
    def build_start_tokens(
        language: Union[Language, str, None] = Language.AUTO,
        task: str = "transcribe",
        without_timestamps: bool = True,
    ) -> List[AnyToken]:
        """Build the start tokens for a task.

        Args:
            language: Language member, ISO code or language name; None or
                ``Language.AUTO`` lets the model detect the language
            task: "transcribe" or "translate"
            without_timestamps: Whether to add ``<|notimestamps|>``

        Returns:
            ``[START_OF_TRANSCRIPT, language, task(, NO_TIMESTAMPS)]``

        Raises:
            InvalidTokenError: If the language is unknown
            ValueError: If the task is unknown
        """
        if language is None:
            language = Language.AUTO
        elif isinstance(language, str):
            try:
                language = Language.from_iso_code(language)
            except InvalidTokenError:
                language = Language.from_name(language)
        elif not isinstance(language, Language):
            raise TypeError(
                f"language must be Language or str, got {type(language).__name__}"
            )

        if task not in TASKS:
            raise ValueError(
                f"task must be 'transcribe' or 'translate', got '{task}'"
            )

        start_tokens: List[AnyToken] = [
            SpecialToken.START_OF_TRANSCRIPT,
            language,
            TASKS[task],
        ]
        if without_timestamps:
            start_tokens.append(SpecialToken.NO_TIMESTAMPS)
        return start_tokens

    def transcribe(
        self,
        encoder_output: Tensor,
        start_tokens: Optional[Sequence[Optional[AnyToken]]] = None,
        language: Union[Language, str, None] = Language.AUTO,
        task: str = "transcribe",
        without_timestamps: bool = True,
        cancel_check: Optional[Callable[[], bool]] = None,
    ) -> Tuple[TranscriptionResult, TranscriptionInfo]:
        """Decode text from an encoder output.

        Args:
            encoder_output: Output of the Whisper encoder
            start_tokens: Explicit start tokens; when given, language, task
                and without_timestamps are ignored
            language: Language of the audio (default: detected by the model)
            task: "transcribe" or "translate" (default: "transcribe")
            without_timestamps: Add ``<|notimestamps|>`` (default: True)
            cancel_check: Optional callable polled between decode steps

        Returns:
            result: Raw text, cleaned text and tokens
            info: Decoding metadata

        Raises:
            TranscriptionFailure: If decoding fails or is cancelled
        """
        if start_tokens is None:
            start_tokens = self.build_start_tokens(language, task, without_timestamps)

        start_time = time.time()

        with cuda_memory_manager():
            state = self.decoding_loop.run(encoder_output, start_tokens, cancel_check)

        try:
            result = self.result_assembler.assemble(state.token_ids)
        except UnknownTokenId as e:
            raise TranscriptionFailure(
                f"Decoder produced a token outside the vocabulary. {str(e)}"
            ) from e

        processing_time = time.time() - start_time
        stats = PerformanceProfiler.calculate_stats(
            num_steps=state.steps,
            processing_time=processing_time,
            device=self.device,
        )

        info = TranscriptionInfo(
            num_steps=state.steps,
            finish_reason=state.finish_reason,
            device=self.device,
            compute_type=self.compute_type,
            processing_time=processing_time,
            tokens_per_second=stats.tokens_per_second,
        )

        logger.info(f"Transcription finished ({info.finish_reason}). {stats}")
        return result, info

    def transcribe_features(
        self,
        features: Union[np.ndarray, Tensor],
        **kwargs,
    ) -> Tuple[TranscriptionResult, TranscriptionInfo]:
        """Encode log-mel features and decode them.

        Args:
            features: Log-mel spectrogram, (n_mels, frames) or
                (1, n_mels, frames)
            **kwargs: Passed on to ``transcribe``

        Returns:
            Same as ``transcribe``

        Raises:
            ValueError: If no encoder is configured or features have an invalid shape
            TypeError: If features is neither np.ndarray nor torch.Tensor
            TranscriptionFailure: If encoding or decoding fails
        """
        if self.encoder is None:
            raise ValueError("transcribe_features requires an encoder model")

        if isinstance(features, np.ndarray):
            features = torch.from_numpy(features)
        elif not isinstance(features, Tensor):
            raise TypeError(
                f"features must be np.ndarray or torch.Tensor, "
                f"got {type(features).__name__}"
            )

        if features.ndim == 2:
            features = features.unsqueeze(0)
        if features.ndim != 3 or features.shape[0] != 1:
            raise ValueError(
                f"features must have shape (n_mels, frames) or (1, n_mels, frames), "
                f"got {tuple(features.shape)}"
            )

        features = features.to(device=self._device, dtype=self._dtype)

        try:
            with torch.inference_mode():
                encoder_output = self.encoder(features)
        except Exception as e:
            raise TranscriptionFailure(f"Encoder failed: {str(e)}") from e

        if isinstance(encoder_output, (list, tuple)):
            encoder_output = encoder_output[0]

        return self.transcribe(encoder_output, **kwargs)
