#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Unit tests for OllamaCommitWriter."""

import logging
import threading
import time
from typing import Any, List, Optional

import httpx
import ollama
import pytest
from langchain_core.messages import AIMessage

from git_ai_commit.errors import (
    InferenceError,
    InferenceServerUnavailableError,
    InferenceTimeoutError,
    ModelNotFoundError,
)
from git_ai_commit.llm import OllamaCommitWriter
from git_ai_commit.schemas import CommitMessageResponse


class FakeChatModel:
    """Chat model stub that records invocations and returns a canned reply."""

    def __init__(self, content: Any = "feat: add thing", error: Optional[Exception] = None) -> None:
        self.content = content
        self.error = error
        self.invocations: List[Any] = []

    def invoke(self, input: Any, config=None, **kwargs) -> AIMessage:
        self.invocations.append(input)
        if self.error is not None:
            raise self.error
        return AIMessage(content=self.content)


def _writer(llm: FakeChatModel, model: str = "gemma3:4b") -> OllamaCommitWriter:
    return OllamaCommitWriter(model=model, llm=llm)  # type: ignore[arg-type]


def test_generate_returns_commit_message_response():
    llm = FakeChatModel("feat: add login form")

    result = _writer(llm).generate("prompt text")

    assert isinstance(result, CommitMessageResponse)
    assert result.commit_message == "feat: add login form"


def test_generate_sends_system_and_human_messages():
    llm = FakeChatModel()

    _writer(llm).generate("describe these changes")

    messages = llm.invocations[0]
    assert messages[0].__class__.__name__ == "SystemMessage"
    assert messages[1].__class__.__name__ == "HumanMessage"
    assert messages[1].content == "describe these changes"


def test_generate_cleans_reasoning_and_fences():
    llm = FakeChatModel("<think>hmm, config change</think>\n```\nchore: bump deps\n```")

    result = _writer(llm).generate("prompt")

    assert result.commit_message == "chore: bump deps"


def test_generate_wraps_long_body_lines():
    llm = FakeChatModel("fix: handle retries\n\n" + "explain the change in detail " * 10)

    result = _writer(llm).generate("prompt")

    assert all(len(line) <= 100 for line in result.commit_message.splitlines())


def test_generate_rejects_empty_reply():
    with pytest.raises(InferenceError):
        _writer(FakeChatModel("   ")).generate("prompt")


def test_generate_maps_connection_errors():
    llm = FakeChatModel(error=ConnectionError("Failed to connect to Ollama"))

    with pytest.raises(InferenceServerUnavailableError, match="ollama serve"):
        _writer(llm).generate("prompt")


def test_generate_maps_timeouts():
    llm = FakeChatModel(error=httpx.ReadTimeout("timed out"))

    with pytest.raises(InferenceTimeoutError):
        _writer(llm).generate("prompt")

class SlowStreamingChatModel:
    """Chat model stub that keeps producing chunks until told to stop."""

    def __init__(self, chunk_delay: float = 0.05) -> None:
        self.chunk_delay = chunk_delay
        self.release = threading.Event()
        self.chunks = 0

    def invoke(self, input: Any, config=None, **kwargs) -> AIMessage:
        while not self.release.wait(self.chunk_delay):
            self.chunks += 1
        return AIMessage(content="feat: add slow thing")


def test_generate_enforces_overall_deadline_on_streaming_reply():
    llm = SlowStreamingChatModel()
    writer = OllamaCommitWriter(model="gemma3:4b", timeout=0.3, llm=llm)  # type: ignore[arg-type]

    started = time.monotonic()
    try:
        with pytest.raises(InferenceTimeoutError, match="did not finish within 0.3 seconds"):
            writer.generate("prompt")
        elapsed = time.monotonic() - started
    finally:
        llm.release.set()

    assert elapsed < 2
    assert llm.chunks >= 2


def test_generate_returns_reply_finished_within_deadline():
    llm = SlowStreamingChatModel()
    llm.release.set()
    writer = OllamaCommitWriter(model="gemma3:4b", timeout=5, llm=llm)  # type: ignore[arg-type]

    assert writer.generate("prompt").commit_message == "feat: add slow thing"



def test_generate_maps_missing_model():
    llm = FakeChatModel(error=ollama.ResponseError("model 'nope' not found", 404))

    with pytest.raises(ModelNotFoundError, match="ollama pull nope"):
        _writer(llm, model="nope").generate("prompt")


def test_generate_wraps_unexpected_errors():
    llm = FakeChatModel(error=RuntimeError("boom"))

    with pytest.raises(InferenceError, match="boom"):
        _writer(llm).generate("prompt")


def test_generate_logs_progress(caplog: pytest.LogCaptureFixture):
    caplog.set_level(logging.DEBUG, logger="git_ai_commit.llm")

    _writer(FakeChatModel()).generate("prompt")

    messages = " ".join(record.message for record in caplog.records)
    assert "Prompt length" in messages
    assert "Commit message generation completed successfully" in messages


def test_reply_text_joins_content_parts():
    reply = AIMessage(content=["feat: ", {"type": "text", "text": "split reply"}])

    assert OllamaCommitWriter._reply_text(reply) == "feat: split reply"


def test_build_model_called_when_no_llm_provided(monkeypatch):
    built = FakeChatModel()
    monkeypatch.setattr(OllamaCommitWriter, "_build_model", lambda self: built)

    writer = OllamaCommitWriter(model="llama3")

    assert writer.llm is built


def test_build_model_configures_chat_ollama():
    writer = OllamaCommitWriter(
        model="llama3", base_url="http://localhost:12345", timeout=5, llm=FakeChatModel()
    )

    llm = writer._build_model()

    assert llm.model == "llama3"
    assert llm.base_url == "http://localhost:12345"
    assert llm.client_kwargs == {"timeout": 5}


def test_repr_and_str_contain_model():
    writer = _writer(FakeChatModel(), model="mistral")

    assert "OllamaCommitWriter" in repr(writer)
    assert "mistral" in repr(writer)
    assert "mistral" in str(writer)
