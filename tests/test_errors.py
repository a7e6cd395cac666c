def test_custom_exceptions_inheritance():
    """Test that custom exceptions inherit from the base exception."""
    from git_ai_commit.errors import (
        ConfigInvalidError,
        EmptyChangeSetError,
        GitAiCommitError,
        InferenceError,
        InferenceServerUnavailableError,
        InferenceTimeoutError,
        ModelNotFoundError,
        VcsError,
    )

    for error in (ConfigInvalidError, EmptyChangeSetError, VcsError, InferenceError):
        assert issubclass(error, GitAiCommitError)
    for error in (InferenceServerUnavailableError, InferenceTimeoutError, ModelNotFoundError):
        assert issubclass(error, InferenceError)
    assert issubclass(GitAiCommitError, Exception)


def test_model_not_found_error_carries_pull_guidance():
    from git_ai_commit.errors import ModelNotFoundError

    error = ModelNotFoundError("llama3")

    assert error.model == "llama3"
    assert "ollama pull llama3" in str(error)
    assert "--pull" in str(error)
