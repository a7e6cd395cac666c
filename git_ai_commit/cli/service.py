import logging
from typing import Callable, List, Optional, Tuple

from git_ai_commit.config import DEFAULT_MODEL
from git_ai_commit.errors import VcsError
from git_ai_commit.git import GitRepository
from git_ai_commit.llm import OllamaCommitWriter
from git_ai_commit.models import ModelRegistry
from git_ai_commit.prompt import PromptBuilder
from git_ai_commit.schemas import (
    CommitMessageResponse,
    PromptFragment,
    RepositoryInfo,
    SummaryConfig,
)
from git_ai_commit.settings import git_ai_commit_logger
from git_ai_commit.summarizer import summarize


WriterFactory = Callable[[str], OllamaCommitWriter]


class GitAiCommitService:
    """Glue between git, the change summarizer, the prompt builder and the model."""

    def __init__(
        self,
        repository: GitRepository,
        registry: ModelRegistry,
        writer_factory: WriterFactory,
        summary_config: SummaryConfig,
        prompt_builder: Optional[PromptBuilder] = None,
        model: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._logger = logger or git_ai_commit_logger(__name__)
        self.repository = repository
        self.registry = registry
        self.summary_config = summary_config
        self.prompt_builder = prompt_builder or PromptBuilder()
        self._writer_factory = writer_factory
        self._model = model

    # --- Public API ---
    def list_models(self) -> List[str]:
        self.registry.ensure_running()
        return self.registry.list_models()

    def resolve_model(self) -> str:
        """Return the configured model, else the last installed one, else the default."""

        if self._model:
            return self._model

        last_model = self.registry.last_model()
        if last_model:
            self._logger.info("No model configured, using last installed model: %s", last_model)
            self._model = last_model
        else:
            self._model = DEFAULT_MODEL
        return self._model

    def ensure_repository(self) -> None:
        if not self.repository.is_repository():
            raise VcsError(
                "Not a git repository. Please run this command from within a git repository."
            )

    def ensure_model(
        self, pull: bool = False, on_pull: Optional[Callable[[str], None]] = None
    ) -> str:
        model = self.resolve_model()
        self.registry.ensure_model_available(model, pull=pull, on_pull=on_pull)
        return model

    def collect(self, add_unstaged: bool = False) -> Tuple[RepositoryInfo, bool]:
        """Collect repository info, staging everything first when asked.

        Returns the snapshot and whether staging happened.
        """
        info = self.repository.collect()

        if add_unstaged and info.has_unstaged():
            self.repository.stage_all()
            self._logger.debug("Refreshing repository status after staging")
            return self.repository.collect(), True

        return info, False

    def summarize(self, info: RepositoryInfo) -> PromptFragment:
        fragment = summarize(info.changes, self.summary_config)
        self._logger.debug(
            "Summarized %d files (%d omitted)", len(fragment.included), len(fragment.omitted)
        )
        return fragment

    def build_prompt(self, info: RepositoryInfo, fragment: PromptFragment) -> str:
        return self.prompt_builder.build(info, fragment)

    def generate_commit(self, prompt: str) -> CommitMessageResponse:
        self._logger.debug("Invoking commit writer...")
        writer = self._writer_factory(self.resolve_model())
        result = writer.generate(prompt)
        self._logger.debug("Invocation completed successfully.")
        return result

    def commit(self, message: str) -> str:
        return self.repository.commit(message)
