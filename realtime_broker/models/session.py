"""
Session state for browser clients connected to the relay WebSocket.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, Optional

from fastapi import WebSocket


@dataclass
class RelaySession:
    session_id: str
    websocket: WebSocket
    user_id: Optional[str] = None
    muted: bool = False
    created_at: float = field(default_factory=time.time)


class SessionRegistry:
    """
    Registry of active relay sessions keyed by session id.
    """

    def __init__(self):
        self.active_sessions: Dict[str, RelaySession] = {}

    def add_session(
        self, session_id: str, websocket: WebSocket, user_id: Optional[str] = None
    ) -> RelaySession:
        session = RelaySession(session_id=session_id, websocket=websocket, user_id=user_id)
        self.active_sessions[session_id] = session
        return session

    def get_session(self, session_id: str) -> Optional[RelaySession]:
        return self.active_sessions.get(session_id)

    def remove_session(self, session_id: str) -> None:
        self.active_sessions.pop(session_id, None)

    def set_muted(self, session_id: str, muted: bool) -> None:
        session = self.active_sessions.get(session_id)
        if session is not None:
            session.muted = muted

    def is_muted(self, session_id: str) -> bool:
        session = self.active_sessions.get(session_id)
        return bool(session and session.muted)

    def __len__(self) -> int:
        return len(self.active_sessions)
