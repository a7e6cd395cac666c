import logging
import re
from pathlib import Path
from typing import List, Optional, Union

from git_ai_commit.config import DEFAULT_TEMPLATE, MAX_UNTRACKED_SHOWN
from git_ai_commit.errors import ConfigInvalidError
from git_ai_commit.schemas import PromptFragment, RepositoryInfo
from git_ai_commit.settings import git_ai_commit_logger


_PLACEHOLDER = re.compile(r"\{(context|diff|status|branch)\}")


class PromptBuilder:
    """Render the prompt sent to the model from repository context and a template.

    Templates may use ``{context}``, ``{diff}``, ``{status}`` and ``{branch}``.
    Substitution is literal so braces inside diffs are left alone. A template
    without any placeholder gets the context appended.
    """

    def __init__(
        self,
        template: str = DEFAULT_TEMPLATE,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._logger = logger or git_ai_commit_logger(__name__)
        self.template = template

    @classmethod
    def from_file(
        cls, path: Union[str, Path], logger: Optional[logging.Logger] = None
    ) -> "PromptBuilder":
        template_path = Path(path).expanduser()
        try:
            template = template_path.read_text(encoding="utf-8")
        except OSError as error:
            raise ConfigInvalidError(
                f"Cannot read template {template_path}: {error.strerror or error}"
            ) from error

        if not template.strip():
            raise ConfigInvalidError(f"Template {template_path} is empty")

        return cls(template=template, logger=logger)

    def build(self, info: RepositoryInfo, fragment: PromptFragment) -> str:
        context = self.build_context(info, fragment)
        self._logger.debug("Prompt context length: %d characters", len(context))

        if not _PLACEHOLDER.search(self.template):
            return f"{self.template.rstrip()}\n\n{context}"

        values = {
            "context": context,
            "diff": fragment.text,
            "status": self.build_status(info),
            "branch": info.branch,
        }
        return _PLACEHOLDER.sub(lambda match: values[match.group(1)], self.template)

    def build_context(self, info: RepositoryInfo, fragment: PromptFragment) -> str:
        lines: List[str] = [f"Current branch: {info.branch}"]
        if info.last_commit:
            lines.append(f"Last commit: {info.last_commit}")

        if fragment.text:
            lines.append("")
            lines.append(fragment.text)

        stats = info.stats
        if stats.files_changed:
            lines.append("")
            lines.append(
                f"Diff summary: {stats.files_changed} files changed, "
                f"{stats.insertions} insertions(+), {stats.deletions} deletions(-)"
            )
            lines.append("")
            lines.append("Detailed changes per file:")
            for stat in stats.file_stats:
                lines.append(
                    f"  {stat.filename}: {stat.insertions} insertions(+), "
                    f"{stat.deletions} deletions(-)"
                )

        if info.untracked:
            shown = ", ".join(info.untracked[:MAX_UNTRACKED_SHOWN])
            line = f"Untracked files ({len(info.untracked)}): {shown}"
            if len(info.untracked) > MAX_UNTRACKED_SHOWN:
                line += f" and {len(info.untracked) - MAX_UNTRACKED_SHOWN} more"
            lines.append("")
            lines.append(line)

        return "\n".join(lines)

    @staticmethod
    def build_status(info: RepositoryInfo) -> str:
        lines = [change.display() for change in info.changes]
        lines.extend(f"?  {path}" for path in info.untracked)
        return "\n".join(lines)
