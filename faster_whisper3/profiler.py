"""Memory and performance profiling utilities.

This module provides tools for measuring decoding throughput and for
releasing GPU memory held by per-call tensors.
"""

from contextlib import contextmanager
from dataclasses import dataclass

import torch


@dataclass
class PerformanceStats:
    """Performance statistics for one decoding call.

    Attributes:
        num_steps: Number of decoder invocations
        processing_time: Wall-clock processing time in seconds
        tokens_per_second: Decode steps per wall-clock second
        device: Device used for processing
    """
    num_steps: int
    processing_time: float
    tokens_per_second: float
    device: str

    def __str__(self) -> str:
        return (
            f"Performance: {self.num_steps} steps in {self.processing_time:.2f}s "
            f"({self.tokens_per_second:.1f} tokens/s, device: {self.device})"
        )


class PerformanceProfiler:
    """Computes decoding throughput."""

    @staticmethod
    def calculate_stats(
        num_steps: int,
        processing_time: float,
        device: str,
    ) -> PerformanceStats:
        """Calculate performance statistics.

        Args:
            num_steps: Number of decoder invocations
            processing_time: Wall-clock processing time in seconds
            device: Device used for processing

        Returns:
            PerformanceStats object with calculated metrics
        """
        tokens_per_second = num_steps / processing_time if processing_time > 0 else 0.0

        return PerformanceStats(
            num_steps=num_steps,
            processing_time=processing_time,
            tokens_per_second=tokens_per_second,
            device=device,
        )


@contextmanager
def cuda_memory_manager():
    """Context manager for CUDA memory management.

    Ensures GPU memory is cleared after operations complete, including
    when they raise.

    Example:
        >>> with cuda_memory_manager():
        ...     state = loop.run(encoder_output, start_tokens)
    """
    try:
        yield
    finally:
        if torch.cuda.is_available():
            torch.cuda.empty_cache()
