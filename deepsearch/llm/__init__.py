"""Chat model construction."""

from deepsearch.llm.factory import create_chat_model
from deepsearch.llm.mock import MockChatModel

__all__ = ["create_chat_model", "MockChatModel"]
