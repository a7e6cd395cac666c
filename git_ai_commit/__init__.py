"""Generate git commit messages with a locally served language model."""

__version__ = "0.1.2"
