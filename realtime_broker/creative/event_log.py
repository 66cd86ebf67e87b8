"""
Append-only JSON lines log of creative sandbox runs.

Each run (single or parallel, success or failure) becomes one line holding the
payload and either the response or the error message.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal, Optional, Union

from realtime_broker.config.constants import LOGGER_NAME
from realtime_broker.config.settings import creative_log_path
from realtime_broker.models.creative import (
    CreativeParallelResult,
    CreativePromptPayload,
    CreativeSingleResult,
)

logger = logging.getLogger(LOGGER_NAME)


class CreativeEventLog:
    """Writes creative sandbox events to a JSON lines file."""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path or creative_log_path())

    def record(
        self,
        kind: Literal["single", "parallel"],
        payload: CreativePromptPayload,
        response: Optional[Union[CreativeSingleResult, CreativeParallelResult]] = None,
        error: Optional[str] = None,
    ) -> None:
        """Append one event; I/O failures are logged, never raised."""
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "kind": kind,
            "payload": payload.model_dump(mode="json"),
        }
        if response is not None:
            entry["response"] = response.model_dump(mode="json")
        if error is not None:
            entry["error"] = error

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(entry, ensure_ascii=False) + "\n")
        except OSError as e:
            logger.error(f"Failed to append creative sandbox log: {e}")
