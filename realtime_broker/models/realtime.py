"""
Pydantic models for events sent by browser clients over the relay WebSocket.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter


class AudioChunkEvent(BaseModel):
    """Base64 PCM16 audio captured by the client."""

    type: Literal["audio_chunk"]
    mimeType: str = Field(..., min_length=1)
    data: str = Field(..., min_length=1)


class AudioCommitEvent(BaseModel):
    """End of a user utterance; asks the model to respond."""

    type: Literal["audio_commit"]


class TextMessageEvent(BaseModel):
    type: Literal["text_message"]
    text: str = Field(..., min_length=1)


class InterruptEvent(BaseModel):
    """Cancel the response currently being generated."""

    type: Literal["interrupt"]


class MuteEvent(BaseModel):
    type: Literal["mute"]
    value: bool


ClientEvent = Annotated[
    Union[AudioChunkEvent, AudioCommitEvent, TextMessageEvent, InterruptEvent, MuteEvent],
    Field(discriminator="type"),
]

client_event_adapter = TypeAdapter(ClientEvent)


def parse_client_event(data: dict) -> ClientEvent:
    """Validate a decoded client message; raises pydantic.ValidationError."""
    return client_event_adapter.validate_python(data)
