"""
Services module for hosted model integrations.

Key components:
- openai_client: AsyncOpenAI construction plus helpers that pull text and token
  usage out of Responses API results.
- responses_proxy: Pass-through for the OpenAI Responses API with a default model.

Usage examples:
```python
from realtime_broker.config.settings import OpenAIConfig
from realtime_broker.services.openai_client import create_openai_client, extract_output_text

client = create_openai_client(OpenAIConfig.from_env())
response = await client.responses.create(model="gpt-4o-mini", input="Hello")
print(extract_output_text(response))
```
"""
