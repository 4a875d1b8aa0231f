"""Completion layer for arbor-chat."""

from .complete import bind_complete, complete
from .errors import CollaboratorError
from .models import create_anthropic_model, create_openai_model, get_model, list_models, register_model
from .types import CompleteFunction, CompletionOptions, Model, Turn

__all__ = [
    "auth",
    "errors",
    "models",
    "providers",
    "types",
    "bind_complete",
    "complete",
    "CollaboratorError",
    "CompleteFunction",
    "CompletionOptions",
    "Model",
    "Turn",
    "create_anthropic_model",
    "create_openai_model",
    "get_model",
    "list_models",
    "register_model",
]
