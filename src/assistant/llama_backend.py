from typing import Any

from .config import AssistantConfig


class LlamaBackend:
    """Chat completion against a local GGUF model via llama.cpp."""

    def __init__(self, config: AssistantConfig):
        from llama_cpp import Llama

        self._llm = Llama(
            model_path=config.model_path,
            n_threads=config.n_threads,
            n_ctx=config.n_ctx,
            n_batch=config.n_batch,
            verbose=config.verbose,
        )
        self._config = config

    def complete(self, messages: list[dict[str, str]], max_tokens: int) -> str:
        response: dict[str, Any] = self._llm.create_chat_completion(
            messages=messages,
            temperature=self._config.temperature,
            top_p=self._config.top_p,
            max_tokens=max_tokens,
        )
        return response["choices"][0]["message"]["content"]
