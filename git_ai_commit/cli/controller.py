import logging
import sys
from typing import Callable, Optional

import click
import pyperclip

from git_ai_commit.errors import EmptyChangeSetError, GitAiCommitError
from git_ai_commit.schemas import CommitMessageResponse
from git_ai_commit.settings import git_ai_commit_logger

from .service import GitAiCommitService


SEPARATOR = "=============================="


class GitAiCommitController:
    """Main controller orchestrating the CLI workflow."""

    def __init__(
        self,
        service: GitAiCommitService,
        logger: Optional[logging.Logger] = None,
        clipboard_copy: Callable[[str], None] = pyperclip.copy,
        echo: Callable[..., None] = click.echo,
        echo_err: Optional[Callable[[str], None]] = None,
        confirm: Callable[..., bool] = click.confirm,
        isatty: Optional[Callable[[], bool]] = None,
        *,
        dry_run: bool = False,
        verbose: bool = False,
        add_unstaged: bool = False,
        confirm_commit: bool = False,
        pull: bool = False,
        list_models: bool = False,
    ) -> None:
        self._logger = logger or git_ai_commit_logger(__name__)
        self._clipboard_copy = clipboard_copy
        self._echo = echo
        self._echo_err = echo_err or (lambda message: self._echo(message, err=True))
        self._confirm = confirm
        self._isatty = isatty or sys.stdin.isatty
        self.service = service
        self.dry_run = dry_run
        self.verbose = verbose
        self.add_unstaged = add_unstaged
        self.confirm_commit = confirm_commit
        self.pull = pull
        self.list_models = list_models

    # --- Public API ---
    def run(self) -> int:
        self._logger.debug("Starting CLI controller run")

        try:
            if self.list_models:
                return self._run_list_models()
            return self._run_commit()
        except EmptyChangeSetError as error:
            self._logger.info("Nothing to summarize: %s", error)
            self._echo(f"ℹ️  {error}")
            self._echo("Stage some changes (or use --add-unstaged) and try again.")
            return 0
        except GitAiCommitError as error:
            self._echo_err(f"❌ {error}")
            return 1

    # --- Private helpers ---
    def _run_list_models(self) -> int:
        models = self.service.list_models()
        if not models:
            self._echo("No models found. Install models with 'ollama pull <model>'")
            return 0

        self._echo("Available models:")
        for model in models:
            self._echo(f"- {model}")
        return 0

    def _run_commit(self) -> int:
        self.service.ensure_repository()

        self._echo("🔍 Analyzing git repository...")
        info, after_staging = self.service.collect(add_unstaged=self.add_unstaged)
        if after_staging:
            self._echo("📦 Staged all unstaged changes.")

        if info.is_empty(after_staging):
            raise EmptyChangeSetError("No changes detected in the repository.")

        if not self.dry_run and not info.staged_changes:
            self._echo_err(
                "❌ No staged changes to commit. Stage files first or rerun with --add-unstaged."
            )
            return 1

        fragment = self.service.summarize(info)

        if self.dry_run:
            self._echo("🧪 Dry run mode - will generate a commit message but not commit")
            self._echo(info.display())

        model = self.service.ensure_model(pull=self.pull, on_pull=self._announce_pull)

        prompt = self.service.build_prompt(info, fragment)
        if self.verbose:
            self._echo("📝 Generated prompt:")
            self._echo(prompt)
            self._echo(SEPARATOR)

        self._echo(f"🤖 Generating commit message with {model}...")
        result = self.service.generate_commit(prompt)
        self._display_commit(result)

        if self.dry_run:
            self._copy_to_clipboard(result.commit_message)
            self._echo("This was a dry run. To actually commit, run without --dry-run")
            return 0

        if self.confirm_commit and self._isatty():
            if not self._confirm("Commit these changes?", default=True):
                self._echo("🚫 Commit cancelled by user")
                return 0

        commit_id = self.service.commit(result.commit_message)
        self._echo(f"✅ Commit {commit_id} created successfully.")
        return 0

    def _display_commit(self, commit_response: CommitMessageResponse) -> None:
        self._logger.debug("Displaying generated commit message")
        title = "Generated Commit Message"
        if self.dry_run:
            title += " (not committed)"
        self._echo(f"\n{title}:")
        self._echo(SEPARATOR)
        self._echo(commit_response.commit_message)
        self._echo(SEPARATOR)

    def _copy_to_clipboard(self, commit_message: str) -> None:
        self._logger.debug("Copying commit message to clipboard")
        try:
            self._clipboard_copy(commit_message)
        except pyperclip.PyperclipException as error:
            self._logger.warning("Could not copy commit message to clipboard: %s", error)
            return
        self._echo("📋 Suggested commit message copied to clipboard.")

    def _announce_pull(self, model: str) -> None:
        self._echo(f"⬇️  Model '{model}' not found. Downloading...")
