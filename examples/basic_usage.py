"""Basic usage example for faster-whisper3.

This example demonstrates:
1. Loading exported Whisper v3 models from a directory
2. Transcribing a log-mel spectrogram
3. Choosing language, task and timestamps
4. Understanding the output format
"""

import numpy as np
import torch

from faster_whisper3 import FastWhisper3, Language, ResourceLoadError, TimestampToken

# =============================================================================
# Example 1: Basic Transcription
# =============================================================================
print("=" * 70)
print("Example 1: Basic Transcription")
print("=" * 70)

# Directory holding the TorchScript exports and vocabulary JSON files:
#   whisper_v3_encoder.pt, whisper_v3_decoder.pt,
#   whisper_v3_decoder_cross_attention_initializer.pt,
#   whisper_v3_vocab.json, whisper_v3_added_tokens.json
model_dir = "models/whisper-v3"  # Your model directory here

# Log-mel spectrogram of 30 s of 16 kHz audio (128 mel bins, 3000 frames).
# Replace with the output of your feature extractor.
mel = np.zeros((128, 3000), dtype=np.float32)

try:
    model = FastWhisper3.load(
        model_dir,
        device="cuda" if torch.cuda.is_available() else "cpu",
        compute_type="float16" if torch.cuda.is_available() else "float32",
    )

    result, info = model.transcribe_features(mel)

    print(f"\nDecoder steps: {info.num_steps} ({info.finish_reason})")
    print(f"Processing time: {info.processing_time:.2f}s")
    print(f"Throughput: {info.tokens_per_second:.1f} tokens/s")
    print(f"Device: {info.device}")
    print(f"Compute type: {info.compute_type}")
    print()

    print("Transcription:")
    print("-" * 70)
    print(result.text)

    # =========================================================================
    # Example 2: Language, Task and Timestamps
    # =========================================================================
    print()
    print("=" * 70)
    print("Example 2: German audio translated to English, with timestamps")
    print("=" * 70)

    result, info = model.transcribe_features(
        mel,
        language=Language.GERMAN,
        task="translate",
        without_timestamps=False,
    )
    print(result.raw_text)

    # =========================================================================
    # Example 3: Inspecting Tokens
    # =========================================================================
    print()
    print("=" * 70)
    print("Example 3: Tokens")
    print("=" * 70)

    for token in result.tokens:
        try:
            label = f"timestamp {TimestampToken.from_id(token.id).ms} ms"
        except ValueError:
            label = token.symbol
        print(f"{token.id:6d}  {label}")

except ResourceLoadError as e:
    print(f"Could not load models from '{model_dir}': {e}")
except Exception as e:
    print(f"Error during transcription: {e}")
