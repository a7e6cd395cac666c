import sys
from pathlib import Path
from typing import Optional

import click
from dotenv import load_dotenv

from git_ai_commit import __version__
from git_ai_commit.config_file import default_config_path, resolve_settings, save_config_file
from git_ai_commit.errors import ConfigInvalidError
from git_ai_commit.git import GitRepository
from git_ai_commit.llm import OllamaCommitWriter
from git_ai_commit.models import ModelRegistry
from git_ai_commit.prompt import PromptBuilder
from git_ai_commit.settings import git_ai_commit_logger, set_git_ai_commit_log_level

from .controller import GitAiCommitController
from .service import GitAiCommitService

logger = git_ai_commit_logger(__name__)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-m", "--model", help="Model to use (default: config, last installed model, gemma3:4b).")
@click.option("-f", "--max-files", type=int, metavar="COUNT", help="Maximum number of files in the prompt [default: 10].")
@click.option("-l", "--max-diff-lines", type=int, metavar="LINES", help="Maximum diff lines per file [default: 50].")
@click.option("-d", "--dry-run", is_flag=True, help="Show the analysis and generated message without committing.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging and print the full prompt.")
@click.option("--debug", is_flag=True, help="Enable debug logging without printing the prompt.")
@click.option("-p", "--port", type=int, help="Port of the Ollama server [default: 11434].")
@click.option("-t", "--timeout", "timeout_seconds", type=int, metavar="SECONDS", help="Generation timeout [default: 60].")
@click.option("-a", "--add-unstaged", is_flag=True, help="Stage all unstaged and untracked changes first.")
@click.option("--confirm", is_flag=True, help="Ask for confirmation before committing.")
@click.option(
    "--template",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Prompt template file; may use {context}, {diff}, {status} and {branch}.",
)
@click.option("--list-models", is_flag=True, help="List the models installed on the server and exit.")
@click.option("--pull", is_flag=True, help="Download the model if it is not installed.")
@click.option("--save-config", is_flag=True, help="Save the effective settings to the config file and exit.")
@click.version_option(__version__, prog_name="git-ai-commit")
def main(
    model: Optional[str],
    max_files: Optional[int],
    max_diff_lines: Optional[int],
    dry_run: bool,
    verbose: bool,
    debug: bool,
    port: Optional[int],
    timeout_seconds: Optional[int],
    add_unstaged: bool,
    confirm: bool,
    template: Optional[Path],
    list_models: bool,
    pull: bool,
    save_config: bool,
) -> None:
    """Generate commit messages for your git changes with a local Ollama model.

    \b
    Examples:
      git-ai-commit                      # describe and commit staged changes
      git-ai-commit --add-unstaged       # stage everything first
      git-ai-commit --dry-run --verbose  # preview the prompt and message
      git-ai-commit -m llama3 -f 20 -l 100
      git-ai-commit --template ./my-prompt.txt

    \b
    Environment:
      GIT_AI_COMMIT_MODEL   overrides the configured model
      OLLAMA_HOST           overrides the server host (host:port or URL)
      GIT_AI_COMMIT_CONFIG  path of the YAML config file
    """
    if debug or verbose:
        set_git_ai_commit_log_level("DEBUG")
        logger.debug("Debug logging enabled")

    load_dotenv()

    try:
        settings = resolve_settings(
            {
                "model": model,
                "max_files": max_files,
                "max_diff_lines": max_diff_lines,
                "port": port,
                "timeout_seconds": timeout_seconds,
            }
        )
        prompt_builder = PromptBuilder.from_file(template) if template else PromptBuilder()
    except ConfigInvalidError as error:
        click.echo(f"❌ {error}", err=True)
        sys.exit(1)

    if save_config:
        path = default_config_path()
        try:
            save_config_file(settings, path)
        except ConfigInvalidError as error:
            click.echo(f"❌ {error}", err=True)
            sys.exit(1)
        click.echo(f"✅ Saved configuration to {path}")
        sys.exit(0)

    service = GitAiCommitService(
        repository=GitRepository(),
        registry=ModelRegistry(base_url=settings.base_url),
        writer_factory=lambda name: OllamaCommitWriter(
            model=name,
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
        ),
        summary_config=settings.summary_config(),
        prompt_builder=prompt_builder,
        model=settings.model,
    )
    controller = GitAiCommitController(
        service,
        dry_run=dry_run,
        verbose=verbose,
        add_unstaged=add_unstaged,
        confirm_commit=confirm,
        pull=pull,
        list_models=list_models,
    )

    sys.exit(controller.run())


if __name__ == "__main__":
    main()
