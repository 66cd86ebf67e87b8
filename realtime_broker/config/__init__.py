"""
Configuration module for the realtime broker.

Key components:
- constants: Application-wide names, default models, event types and timeouts.
- settings: Environment-backed configuration objects (OpenAI, JWT, CORS).
- logging_config: Console and rotating file logging for the application logger.

Usage examples:
```python
from realtime_broker.config.constants import LOGGER_NAME
from realtime_broker.config.settings import OpenAIConfig

config = OpenAIConfig.from_env()

from realtime_broker.config.logging_config import configure_logging
logger = configure_logging()
logger.info("Application started")
```
"""
