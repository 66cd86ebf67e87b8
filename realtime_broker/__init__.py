"""
Realtime Broker - browser to OpenAI Realtime API relay with auxiliary model services

This application brokers voice and text conversations between browser clients and
OpenAI's Realtime API, and exposes a few HTTP helpers built on the Responses API.

Architecture Overview:
- FastAPI server exposing a WebSocket relay and JSON endpoints
- OpenAI Realtime API integration over WebSockets for conversation streaming
- OpenAI Responses API integration for contests, creative runs and proxying
- Stateless ranking logic for picking contest winners

Key Components:
- audio: PCM16 encoding helpers shared by the relay and clients
- auth: Dev JWT issuance and verification
- bot: Realtime API client and the browser relay bridge
- config: Constants, environment settings and logging setup
- contest: Expert contest runner and the outcome decider
- creative: Creative sandbox roles, judges, aggregation and runner
- models: Pydantic models for every payload crossing the wire
- services: OpenAI client helpers and the Responses API proxy
- websocket_manager: Browser WebSocket lifecycle and event routing

Getting Started:
1. Set up environment variables:
   - OPENAI_API_KEY: Your OpenAI API key
   - BFF_JWT_SECRET / BFF_JWT_AUDIENCE / BFF_JWT_ISSUER: Dev token signing
   - PORT: Port to run the server on (default 8000)
   - LOG_LEVEL: Logging level (default INFO)

2. Start the server:
   ```bash
   python run.py
   ```
"""

__version__ = "1.0.0"
