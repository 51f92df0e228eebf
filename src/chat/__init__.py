"""Browser-side chat logic.

Responsibilities:
    - Client secret issuance at startup
    - Sending messages and consuming the streamed reply
    - Thread operations and error banner state

Kept free of UI code so it can be driven directly in tests.
"""

from src.chat.client import ChatClient, ChatError, SessionError
from src.chat.config import ChatConfig, get_chat_config
from src.chat.session import ChatSession

__all__ = [
    "ChatClient",
    "ChatConfig",
    "ChatError",
    "ChatSession",
    "SessionError",
    "get_chat_config",
]
