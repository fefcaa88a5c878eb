from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class AssistantConfigurationError(Exception):
    """Raised when assistant configuration is invalid."""

    pass


@dataclass(frozen=True)
class AssistantConfig:
    """Configuration for local study-assistant inference."""

    model_path: str
    model_name: str = "local"
    system_prompt_path: str = ""
    n_threads: int = 4
    n_ctx: int = 2048
    n_batch: int = 256
    temperature: float = 0.7
    top_p: float = 0.9
    max_tokens: int = 512
    max_history_turns: int = 10
    verbose: bool = False

    def __post_init__(self):
        """Validate configuration values."""
        if not self.model_path or not self.model_path.strip():
            raise AssistantConfigurationError("model_path cannot be empty")

        model_file = Path(self.model_path)
        if not model_file.exists():
            raise AssistantConfigurationError(
                f"Model file does not exist: {self.model_path}"
            )
        if not model_file.is_file():
            raise AssistantConfigurationError(
                f"Model path is not a file: {self.model_path}"
            )

        if self.n_threads < 1:
            raise AssistantConfigurationError(
                f"n_threads must be >= 1, got: {self.n_threads}"
            )

        if self.n_ctx < 128:
            raise AssistantConfigurationError(f"n_ctx must be >= 128, got: {self.n_ctx}")

        if self.n_batch < 1:
            raise AssistantConfigurationError(f"n_batch must be >= 1, got: {self.n_batch}")
        if self.n_batch > self.n_ctx:
            raise AssistantConfigurationError(
                f"n_batch ({self.n_batch}) cannot exceed n_ctx ({self.n_ctx})"
            )

        if not 0.0 <= self.temperature <= 2.0:
            raise AssistantConfigurationError(
                f"temperature must be in [0.0, 2.0], got: {self.temperature}"
            )

        if not 0.0 <= self.top_p <= 1.0:
            raise AssistantConfigurationError(
                f"top_p must be in [0.0, 1.0], got: {self.top_p}"
            )

        if self.max_tokens < 1:
            raise AssistantConfigurationError(
                f"max_tokens must be >= 1, got: {self.max_tokens}"
            )

    @classmethod
    def from_settings(cls, settings) -> "AssistantConfig":
        return cls(
            model_path=settings.model_path,
            model_name=settings.model_name,
            system_prompt_path=settings.system_prompt,
            n_threads=settings.n_threads,
            n_ctx=settings.n_ctx,
            n_batch=settings.n_batch,
            temperature=settings.temperature,
            top_p=settings.top_p,
            max_tokens=settings.max_tokens,
            max_history_turns=settings.max_history_turns,
            verbose=settings.verbose,
        )
