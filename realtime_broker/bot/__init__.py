"""
Bot module bridging browser clients with OpenAI's Realtime API.

Key components:
- RealtimeEventClient: WebSocket client for the Realtime API with reconnection and a
  bounded queue of decoded server events.
- RealtimeRelayBridge: Per-session owner of Realtime clients that translates browser
  events into Realtime events and forwards server events back.

Usage examples:
```python
from realtime_broker.bot import bridge

await bridge.create_client(session_id, websocket)
await bridge.handle_client_event(session_id, event)
await bridge.close_client(session_id)
```
"""

from realtime_broker.bot.realtime_api import RealtimeEventClient
from realtime_broker.bot.realtime_bridge import RealtimeRelayBridge, bridge

__all__ = ["RealtimeEventClient", "RealtimeRelayBridge", "bridge"]
