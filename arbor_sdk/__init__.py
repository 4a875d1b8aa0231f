"""SDK entry points for arbor-chat."""

from .config import Settings, load_settings
from .sdk import create_chat_service, create_complete_fn, create_label_fn

__all__ = [
    "Settings",
    "create_chat_service",
    "create_complete_fn",
    "create_label_fn",
    "load_settings",
]
