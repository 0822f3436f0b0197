"""Single-shot generative-text backend built on the Claude Agent SDK.

Each call opens a fresh client, so no conversation state survives between
messages.
"""

import contextlib
import logging

from claude_agent_sdk import (
    AssistantMessage,
    ClaudeAgentOptions,
    ClaudeSDKClient,
    ResultMessage,
    TextBlock,
)

from pengingat_bot.config import MODEL
from pengingat_bot.errors import AssistantError

log = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "Kamu adalah asisten pribadi yang menjawab pesan chat. "
    "Jawab singkat dan jelas dalam bahasa yang dipakai pengguna. "
    "Untuk membuat pengingat, pengguna bisa mengetik /set."
)


class ClaudeAssistant:
    def __init__(self, *, model: str = MODEL) -> None:
        self.options = ClaudeAgentOptions(
            system_prompt=SYSTEM_PROMPT,
            model=model,
            max_turns=1,
            tools=[],
        )

    async def complete(self, prompt: str) -> str:
        client = ClaudeSDKClient(self.options)
        try:
            await client.connect()
            await client.query(prompt)
            text = ""
            async for msg in client.receive_response():
                if isinstance(msg, AssistantMessage):
                    for block in msg.content:
                        if isinstance(block, TextBlock):
                            text += block.text
                elif isinstance(msg, ResultMessage):
                    if not text and msg.result:
                        text = msg.result
        except Exception as e:
            raise AssistantError(f"error generating response: {e}") from e
        finally:
            with contextlib.suppress(Exception):
                await client.disconnect()
        if not text.strip():
            raise AssistantError("no response received")
        return text
