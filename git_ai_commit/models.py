"""Model management against the local Ollama server."""

import logging
from typing import Any, Callable, List, Optional

import httpx
import ollama

from git_ai_commit.config import DEFAULT_PORT
from git_ai_commit.errors import (
    InferenceError,
    InferenceServerUnavailableError,
    InferenceTimeoutError,
    ModelNotFoundError,
)
from git_ai_commit.settings import git_ai_commit_logger


def server_unavailable_error(base_url: str) -> InferenceServerUnavailableError:
    return InferenceServerUnavailableError(
        f"Cannot reach the inference server at {base_url}. "
        "Start it with 'ollama serve' or check --port / OLLAMA_HOST."
    )


def translate_ollama_error(
    error: Exception, base_url: str, model: Optional[str] = None
) -> InferenceError:
    """Map client and transport failures onto the InferenceError hierarchy."""

    if isinstance(error, InferenceError):
        return error
    if isinstance(error, httpx.TimeoutException):
        return InferenceTimeoutError(
            f"The inference server at {base_url} did not answer in time. "
            "Increase --timeout or try a smaller model."
        )
    if isinstance(error, (ConnectionError, httpx.ConnectError)):
        return server_unavailable_error(base_url)
    if isinstance(error, ollama.ResponseError) and error.status_code == 404 and model:
        return ModelNotFoundError(model)
    return InferenceError(f"Inference request failed: {error}")


class ModelRegistry:
    """List, check and pull models on an Ollama server."""

    def __init__(
        self,
        base_url: str = f"http://localhost:{DEFAULT_PORT}",
        timeout: Optional[float] = None,
        client: Optional[Any] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._logger = logger or git_ai_commit_logger(__name__)
        self.base_url = base_url
        self.client = client or ollama.Client(host=base_url, timeout=timeout)

    # --- Public API ---
    def is_running(self) -> bool:
        try:
            self.client.list()
        except Exception as error:
            self._logger.debug("Inference server check failed: %s", error)
            return False
        return True

    def ensure_running(self) -> None:
        if not self.is_running():
            raise server_unavailable_error(self.base_url)

    def list_models(self) -> List[str]:
        self._logger.debug("Listing models from %s", self.base_url)
        response = self._call(self.client.list)
        names = [entry.model for entry in response.models if entry.model]
        self._logger.debug("Found %d models", len(names))
        return names

    def has_model(self, model: str) -> bool:
        installed = self.list_models()
        candidates = {model} if ":" in model else {model, f"{model}:latest"}
        return any(name in candidates for name in installed)

    def last_model(self) -> Optional[str]:
        """Return the last installed model, None if none or the server is down."""

        try:
            models = self.list_models()
        except InferenceError as error:
            self._logger.debug("Could not look up installed models: %s", error)
            return None
        return models[-1] if models else None

    def pull_model(self, model: str) -> None:
        self._logger.info("Pulling model %s", model)
        self._call(self.client.pull, model, model=model)

    def ensure_model_available(
        self,
        model: str,
        pull: bool = False,
        on_pull: Optional[Callable[[str], None]] = None,
    ) -> None:
        """Fail with ModelNotFoundError unless *model* is installed or *pull* is set."""

        if self.has_model(model):
            self._logger.debug("Model %s is available", model)
            return

        if not pull:
            raise ModelNotFoundError(model)

        if on_pull is not None:
            on_pull(model)
        self.pull_model(model)

    # --- Private helpers ---
    def _call(self, method: Callable[..., Any], *args: Any, model: Optional[str] = None) -> Any:
        try:
            return method(*args)
        except Exception as error:
            translated = translate_ollama_error(error, self.base_url, model)
            self._logger.error("%s", translated)
            raise translated from error
