"""
Constants and configuration values used throughout the application.

This module defines constants that are used across different parts of the application,
providing a centralized location for configuration values and making it easier to
maintain consistent naming throughout the codebase.
"""

# Logger name used throughout the application
LOGGER_NAME = "realtime_broker"

# Default OpenAI models
DEFAULT_REALTIME_MODEL = "gpt-4o-realtime-preview-2025-06-03"
DEFAULT_RESPONSES_MODEL = "gpt-4o-mini"
CONTEST_MODEL = "gpt-5-mini"
CREATIVE_MODEL = "gpt-5-mini"

# Realtime API endpoint
REALTIME_URL = "wss://api.openai.com/v1/realtime"

# Broker -> OpenAI Realtime event types
REALTIME_AUDIO_APPEND = "input_audio_buffer.append"
REALTIME_AUDIO_COMMIT = "input_audio_buffer.commit"
REALTIME_ITEM_CREATE = "conversation.item.create"
REALTIME_RESPONSE_CREATE = "response.create"
REALTIME_RESPONSE_CANCEL = "response.cancel"

# Broker -> client event types
BROKER_EVENT_SESSION_CREATED = "session.created"
BROKER_EVENT_SERVER_EVENT = "server_event"
BROKER_EVENT_ERROR = "error"

# Contests need at least this many scored participants
MIN_CONTEST_PARTICIPANTS = 2

# Dev token lifetime
DEV_TOKEN_TTL_SECONDS = 15 * 60
DEFAULT_DEV_SCOPES = ["voice:session"]

# Placeholder used in prompts when optional context is missing
EMPTY_CONTEXT_PLACEHOLDER = "なし"

# WebSocket close codes used when a relay session cannot start
WS_CLOSE_POLICY_VIOLATION = 1008
WS_CLOSE_INTERNAL_ERROR = 1011
