"""faster-whisper3: Greedy decoding core for Whisper v3 models.

This module provides the decoding loop, key/value cache handling, logits
processing and byte-level text decoding needed to turn exported Whisper v3
encoder/decoder models into transcriptions.

Example:
    >>> from faster_whisper3 import FastWhisper3
    >>> model = FastWhisper3.load("/models/whisper-v3", device="cuda")
    >>> result, info = model.transcribe_features(mel, language="en")
    >>> print(result.text)
"""

from .data_models import DecodingState, TranscriptionInfo, TranscriptionResult
from .decoding import DecodingLoop
from .exceptions import (
    ConfigurationError,
    InvalidTokenError,
    ResourceLoadError,
    TranscriptionFailure,
    UnknownTokenId,
    Whisper3Error,
)
from .fast_whisper import FastWhisper3
from .kv_cache import KeyValueCache, KVCacheManager
from .logits_processors import (
    ForceStartTokens,
    LogitsProcessorPipeline,
    SuppressAtBegin,
    SuppressTokens,
)
from .profiler import PerformanceProfiler, PerformanceStats, cuda_memory_manager
from .result_assembler import ResultAssembler
from .text_codec import ByteLevelTextCodec
from .tokens import (
    MAX_TIMESTAMP,
    MIN_TIMESTAMP,
    Language,
    SpecialToken,
    TimestampToken,
    Token,
)
from .vocabulary import VocabularyTable

__version__ = "0.1.0"

__all__ = [
    "ByteLevelTextCodec",
    "ConfigurationError",
    "DecodingLoop",
    "DecodingState",
    "FastWhisper3",
    "ForceStartTokens",
    "InvalidTokenError",
    "KVCacheManager",
    "KeyValueCache",
    "Language",
    "LogitsProcessorPipeline",
    "MAX_TIMESTAMP",
    "MIN_TIMESTAMP",
    "PerformanceProfiler",
    "PerformanceStats",
    "ResourceLoadError",
    "ResultAssembler",
    "SpecialToken",
    "SuppressAtBegin",
    "SuppressTokens",
    "TimestampToken",
    "Token",
    "TranscriptionFailure",
    "TranscriptionInfo",
    "TranscriptionResult",
    "UnknownTokenId",
    "VocabularyTable",
    "Whisper3Error",
    "cuda_memory_manager",
]
