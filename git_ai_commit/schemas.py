from enum import Enum
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator

from git_ai_commit.config import (
    CONFIG_FILE_NAMES,
    DEFAULT_MAX_DIFF_LINES,
    DEFAULT_MAX_FILES,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT_SECONDS,
    MAX_LINE_LENGTH,
)
from git_ai_commit.errors import ConfigInvalidError


class ChangeKind(str, Enum):
    """Kind of change as reported by ``git diff --name-status``."""

    ADDED = "A"
    MODIFIED = "M"
    DELETED = "D"
    RENAMED = "R"
    COPIED = "C"
    UNMERGED = "U"


class FileChange(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    kind: ChangeKind
    old_path: Optional[str] = None
    diff: tuple[str, ...] = ()
    staged: bool = True

    def display(self) -> str:
        if self.old_path and self.kind in (ChangeKind.RENAMED, ChangeKind.COPIED):
            return f"{self.kind.value}  {self.old_path} -> {self.path}"
        return f"{self.kind.value}  {self.path}"

    def is_test_file(self) -> bool:
        lowered = self.path.lower()
        return "test" in lowered or "spec" in lowered

    def is_config_file(self) -> bool:
        lowered = self.path.lower()
        return any(lowered.endswith(name) for name in CONFIG_FILE_NAMES)


ChangeSet = Sequence[FileChange]


class SummaryConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_files: int = DEFAULT_MAX_FILES
    max_diff_lines: int = DEFAULT_MAX_DIFF_LINES

    @field_validator("max_files", "max_diff_lines")
    @classmethod
    def must_be_positive(cls, value: int, info: ValidationInfo) -> int:
        if value <= 0:
            raise ConfigInvalidError(f"{info.field_name} must be a positive integer (got {value})")
        return value


class PromptFragment(BaseModel):
    """Bounded description of a change set, ready to embed in a prompt."""

    model_config = ConfigDict(frozen=True)

    text: str
    included: tuple[str, ...] = ()
    omitted: tuple[str, ...] = ()

    def __str__(self) -> str:
        return self.text


class FileStat(BaseModel):
    model_config = ConfigDict(frozen=True)

    filename: str
    insertions: int = 0
    deletions: int = 0


class DiffStat(BaseModel):
    model_config = ConfigDict(frozen=True)

    file_stats: tuple[FileStat, ...] = ()

    @property
    def files_changed(self) -> int:
        return len(self.file_stats)

    @property
    def insertions(self) -> int:
        return sum(stat.insertions for stat in self.file_stats)

    @property
    def deletions(self) -> int:
        return sum(stat.deletions for stat in self.file_stats)

    def display(self) -> str:
        if not self.files_changed:
            return "  No changes in diff"

        lines = [
            f"  {self.files_changed} files changed, {self.insertions} insertions(+), "
            f"{self.deletions} deletions(-)"
        ]
        for stat in self.file_stats:
            if stat.insertions or stat.deletions:
                lines.append(f"    {stat.filename}: +{stat.insertions} -{stat.deletions}")
        return "\n".join(lines)


class RepositoryInfo(BaseModel):
    """Snapshot of the repository state taken for one run."""

    model_config = ConfigDict(frozen=True)

    branch: str = ""
    last_commit: Optional[str] = None
    changes: tuple[FileChange, ...] = ()
    untracked: tuple[str, ...] = ()
    stats: DiffStat = DiffStat()

    @property
    def staged_changes(self) -> tuple[FileChange, ...]:
        return tuple(change for change in self.changes if change.staged)

    @property
    def unstaged_changes(self) -> tuple[FileChange, ...]:
        return tuple(change for change in self.changes if not change.staged)

    def has_unstaged(self) -> bool:
        return bool(self.unstaged_changes or self.untracked)

    def is_empty(self, after_staging: bool = False) -> bool:
        """Return True when there is nothing to commit.

        After ``--add-unstaged`` only the index matters; before staging any
        tracked or untracked change counts.
        """
        if after_staging:
            return not self.staged_changes
        return not self.changes and not self.untracked

    def display(self) -> str:
        lines = [f"Branch: {self.branch or '(detached)'}"]
        if self.last_commit:
            lines.append(f"Last commit: {self.last_commit.splitlines()[0]}")

        lines.append("")
        lines.append("Diff stats:")
        lines.append(self.stats.display())

        if self.changes:
            lines.append("")
            lines.append("File changes:")
            for change in self.changes:
                state = "staged" if change.staged else "unstaged"
                lines.append(f"  {change.display()} ({state})")

        if self.untracked:
            lines.append("")
            lines.append("Untracked files:")
            lines.extend(f"  {path}" for path in self.untracked)

        return "\n".join(lines)


class AppSettings(BaseModel):
    """Effective settings for one run after merging every configuration source."""

    model: Optional[str] = None
    max_files: int = DEFAULT_MAX_FILES
    max_diff_lines: int = DEFAULT_MAX_DIFF_LINES
    port: int = DEFAULT_PORT
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    host: Optional[str] = None

    @field_validator("max_files", "max_diff_lines", "timeout_seconds")
    @classmethod
    def must_be_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value

    @field_validator("port")
    @classmethod
    def must_be_valid_port(cls, value: int) -> int:
        if not 0 < value < 65536:
            raise ValueError("must be between 1 and 65535")
        return value

    @property
    def base_url(self) -> str:
        if not self.host:
            return f"http://localhost:{self.port}"

        scheme, separator, rest = self.host.strip().rstrip("/").partition("://")
        if not separator:
            scheme, rest = "http", scheme

        netloc, slash, path = rest.partition("/")
        if ":" not in netloc:
            netloc = f"{netloc}:{self.port}"
        return f"{scheme}://{netloc}{slash}{path}"

    def summary_config(self) -> SummaryConfig:
        return SummaryConfig(max_files=self.max_files, max_diff_lines=self.max_diff_lines)


class CommitMessageResponse(BaseModel):
    commit_message: str

    @field_validator("commit_message")
    @classmethod
    def enforce_line_length(cls, value: str) -> str:
        if not value:
            return value

        for line in value.splitlines():
            if len(line) > MAX_LINE_LENGTH:
                raise ValueError(
                    f"The commit_message lines must be {MAX_LINE_LENGTH} characters "
                    f"or fewer, message: {value}"
                )

        return value
