from .config import AssistantConfig, AssistantConfigurationError
from .errors import AssistantError
from .llama_backend import LlamaBackend
from .prompts import generate_flashcards, parse_flashcards, study_recommendations
from .session import DEFAULT_SYSTEM_PROMPT, ChatSession, load_system_prompt
from .types import ChatBackend, ChatMessage, ChatResponse, Flashcard

__all__ = [
    "AssistantConfig",
    "AssistantConfigurationError",
    "AssistantError",
    "ChatBackend",
    "ChatMessage",
    "ChatResponse",
    "ChatSession",
    "DEFAULT_SYSTEM_PROMPT",
    "Flashcard",
    "LlamaBackend",
    "generate_flashcards",
    "load_system_prompt",
    "parse_flashcards",
    "study_recommendations",
]
