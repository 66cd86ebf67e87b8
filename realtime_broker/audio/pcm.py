"""
Conversion between float audio samples and base64 little-endian PCM16.

Negative samples scale by 32768 and positive ones by 32767 so that -1.0 and
1.0 map exactly onto the int16 limits.
"""

import base64
from typing import Iterable, Union

import numpy as np

NEGATIVE_SCALE = 0x8000
POSITIVE_SCALE = 0x7FFF
PCM16_DTYPE = np.dtype("<i2")

Samples = Union[np.ndarray, Iterable[float]]


def clamp_samples(samples: Samples) -> np.ndarray:
    """Clamp to [-1, 1] and replace NaN or infinite values with silence."""
    values = np.asarray(samples, dtype=np.float64)
    values = np.where(np.isfinite(values), values, 0.0)
    return np.clip(values, -1.0, 1.0)


def encode_float32_to_pcm16_base64(samples: Samples) -> str:
    """
    Encode mono float samples as base64 PCM16.

    Args:
        samples: Float samples nominally in [-1, 1]

    Returns:
        Base64 text, or an empty string when there are no samples
    """
    clamped = clamp_samples(samples)
    if clamped.size == 0:
        return ""
    scaled = np.where(clamped < 0, clamped * NEGATIVE_SCALE, clamped * POSITIVE_SCALE)
    # Halves round up, not to even as np.rint would
    pcm = np.floor(scaled + 0.5).astype(PCM16_DTYPE)
    return base64.b64encode(pcm.tobytes()).decode("ascii")


def decode_pcm16_base64(data: str) -> np.ndarray:
    """Decode base64 PCM16 into an int16 array; a trailing odd byte is dropped."""
    raw = base64.b64decode(data)
    usable = len(raw) - (len(raw) % 2)
    return np.frombuffer(raw[:usable], dtype=PCM16_DTYPE).astype(np.int16)


def pcm16_to_float32(data: str) -> np.ndarray:
    """Decode base64 PCM16 back to float32 samples in [-1, 1]."""
    pcm = decode_pcm16_base64(data).astype(np.float32)
    return np.where(pcm < 0, pcm / NEGATIVE_SCALE, pcm / POSITIVE_SCALE).astype(np.float32)
