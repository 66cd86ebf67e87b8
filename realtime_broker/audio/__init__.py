"""
Audio helpers for the PCM16 format used by the OpenAI Realtime API.
"""

from realtime_broker.audio.pcm import (
    decode_pcm16_base64,
    encode_float32_to_pcm16_base64,
    pcm16_to_float32,
)

__all__ = ["decode_pcm16_base64", "encode_float32_to_pcm16_base64", "pcm16_to_float32"]
