class GitAiCommitError(Exception):
    """Base exception for git-ai-commit errors."""


class ConfigInvalidError(GitAiCommitError):
    """Raised when a flag, config file value or template is unusable."""


class EmptyChangeSetError(GitAiCommitError):
    """Raised when there are no changes to describe."""


class VcsError(GitAiCommitError):
    """Raised when a git operation fails."""


class InferenceError(GitAiCommitError):
    """Raised when the inference server cannot produce a commit message."""


class InferenceServerUnavailableError(InferenceError):
    """Raised when the inference server cannot be reached."""


class ModelNotFoundError(InferenceError):
    """Raised when the requested model is not installed on the server."""

    def __init__(self, model: str) -> None:
        super().__init__(
            f"Model '{model}' is not available. "
            f"Install it with 'ollama pull {model}' or rerun with --pull."
        )
        self.model = model


class InferenceTimeoutError(InferenceError):
    """Raised when generation does not finish within the configured timeout."""
