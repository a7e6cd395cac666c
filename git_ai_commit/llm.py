#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Module for generating commit messages with a locally served model."""

import logging
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import List, Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_ollama import ChatOllama
from pydantic import ValidationError

from git_ai_commit.config import (
    DEFAULT_MODEL,
    DEFAULT_NUM_PREDICT,
    DEFAULT_PORT,
    DEFAULT_TEMPERATURE,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_TOP_P,
    SYSTEM_PROMPT,
)
from git_ai_commit.errors import InferenceError, InferenceTimeoutError
from git_ai_commit.models import translate_ollama_error
from git_ai_commit.schemas import CommitMessageResponse
from git_ai_commit.settings import git_ai_commit_logger
from git_ai_commit.utils import clean_model_output, wrap_commit_message


class OllamaCommitWriter:
    """Generate commit messages from a prompt using an Ollama chat model.

    Attributes:
        model (str): The model name served by Ollama.
        base_url (str): Base URL of the inference server.
        timeout (float): Seconds to wait for the whole generation request.
        llm (BaseChatModel): The chat model instance.
    """

    # --- Initialization ---
    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        base_url: str = f"http://localhost:{DEFAULT_PORT}",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        llm: Optional[BaseChatModel] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Initialize the writer with configuration and dependencies.

        Args:
            model: Ollama model name to use.
            base_url: Base URL of the Ollama server.
            timeout: Request timeout in seconds.
            llm: Pre-configured chat model instance.
            logger: Logger to use instead of the module logger.
        """
        self._logger = logger or git_ai_commit_logger(__name__)

        self._logger.debug("Initializing OllamaCommitWriter with model: %s", model)

        self.model = model
        self.base_url = base_url
        self.timeout = timeout

        self.llm = llm or self._build_model()

    # --- Public methods ---
    def generate(self, prompt: str) -> CommitMessageResponse:
        """Generate a commit message for *prompt*.

        Args:
            prompt: Fully rendered prompt describing the changes.

        Returns:
            CommitMessageResponse with the cleaned and wrapped message.

        Raises:
            InferenceError: If the server fails, times out or returns nothing usable.
        """
        self._logger.debug("Starting commit message generation")
        self._logger.debug("Prompt length: %d characters", len(prompt))

        messages = self._build_messages(prompt)

        try:
            reply = self._invoke_with_deadline(messages)
        except InferenceTimeoutError:
            self._logger.error("Generation exceeded %s seconds", self.timeout)
            raise
        except Exception as error:
            translated = translate_ollama_error(error, self.base_url, self.model)
            self._logger.error(
                "Failed to generate commit message: %s", translated, exc_info=True
            )
            raise translated from error

        commit_message = wrap_commit_message(clean_model_output(self._reply_text(reply)))
        if not commit_message:
            raise InferenceError(f"Model '{self.model}' returned an empty commit message.")

        try:
            result = CommitMessageResponse(commit_message=commit_message)
        except ValidationError as error:
            raise InferenceError(f"Model returned an unusable commit message: {error}") from error

        self._logger.debug("Commit message generation completed successfully")
        return result

    # --- Private methods ---
    def _build_model(self) -> ChatOllama:
        """Build the ChatOllama instance.

        Returns:
            Configured ChatOllama instance.
        """
        self._logger.debug("Building ChatOllama model %s at %s", self.model, self.base_url)

        llm = ChatOllama(
            model=self.model,
            base_url=self.base_url,
            temperature=DEFAULT_TEMPERATURE,
            top_p=DEFAULT_TOP_P,
            num_predict=DEFAULT_NUM_PREDICT,
            client_kwargs={"timeout": self.timeout},
        )
        self._logger.debug(
            "Using LLM: %s with temperature: %.1f", llm.model, DEFAULT_TEMPERATURE
        )
        return llm

    # --- Internal helpers ---
    def _invoke_with_deadline(self, messages: List[BaseMessage]) -> BaseMessage:
        """Invoke the model, giving up once ``timeout`` seconds have passed in total.

        The client timeout only bounds each read of the streamed reply, so the
        call runs on a daemon thread and is abandoned when the deadline expires.
        """
        outcome: Future = Future()

        def invoke() -> None:
            try:
                outcome.set_result(self.llm.invoke(messages))
            except Exception as error:
                outcome.set_exception(error)

        threading.Thread(target=invoke, name="ollama-generate", daemon=True).start()

        try:
            return outcome.result(timeout=self.timeout)
        except FutureTimeoutError as error:
            raise InferenceTimeoutError(
                f"Model '{self.model}' did not finish within {self.timeout:g} seconds. "
                "Increase --timeout or try a smaller model."
            ) from error

    @staticmethod
    def _build_messages(
        prompt: str, system_prompt: str = SYSTEM_PROMPT
    ) -> List[BaseMessage]:
        """Build the message list for the chat model.

        Args:
            prompt: Rendered prompt describing the changes.
            system_prompt: System prompt for the model.

        Returns:
            List of BaseMessage instances.
        """
        return [
            SystemMessage(content=system_prompt),
            HumanMessage(content=prompt),
        ]

    @staticmethod
    def _reply_text(reply: object) -> str:
        content = getattr(reply, "content", reply)
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            return "".join(
                part if isinstance(part, str) else str(part.get("text", ""))
                for part in content
            )
        return str(content or "")

    # --- Dunder methods ---
    def __repr__(self) -> str:
        """Return a machine-readable representation of OllamaCommitWriter."""
        return (
            f"{self.__class__.__name__}(model={self.model!r}, "
            f"base_url={self.base_url!r}, timeout={self.timeout})"
        )

    def __str__(self) -> str:
        """Return a human-readable description of OllamaCommitWriter."""
        return f"OllamaCommitWriter using {self.model} at {self.base_url}"
