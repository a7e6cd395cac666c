"""Thin adapter around the git executable."""

import logging
import os
import subprocess
from typing import Callable, List, Optional, Sequence

from git_ai_commit.errors import VcsError
from git_ai_commit.schemas import (
    ChangeKind,
    DiffStat,
    FileChange,
    FileStat,
    RepositoryInfo,
)
from git_ai_commit.settings import git_ai_commit_logger


RunProcess = Callable[[Sequence[str]], subprocess.CompletedProcess]

_KIND_BY_LETTER = {
    "A": ChangeKind.ADDED,
    "M": ChangeKind.MODIFIED,
    "T": ChangeKind.MODIFIED,
    "D": ChangeKind.DELETED,
    "R": ChangeKind.RENAMED,
    "C": ChangeKind.COPIED,
    "U": ChangeKind.UNMERGED,
}


def parse_name_status(output: str, *, staged: bool = True) -> List[FileChange]:
    """Parse ``git diff --name-status -z`` output into diff-less FileChanges.

    Records are NUL separated: a status field followed by one path, or two
    paths (source then destination) for renames and copies.
    """

    fields = output.split("\0")
    changes: List[FileChange] = []
    index = 0
    while index < len(fields):
        status = fields[index].strip()
        index += 1
        if not status:
            continue

        kind = _KIND_BY_LETTER.get(status[:1])
        if kind is None:
            raise VcsError(f"Unknown git status: {status}")

        width = 2 if kind in (ChangeKind.RENAMED, ChangeKind.COPIED) else 1
        paths = fields[index : index + width]
        index += width
        if len(paths) < width or not all(paths):
            raise VcsError(f"Incomplete git status entry: {status}")

        if width == 2:
            changes.append(
                FileChange(path=paths[1], old_path=paths[0], kind=kind, staged=staged)
            )
        else:
            changes.append(FileChange(path=paths[0], kind=kind, staged=staged))

    return changes


def parse_numstat(output: str) -> List[FileStat]:
    """Parse ``git diff --numstat -z`` output; binary files count as zero lines."""

    fields = output.split("\0")
    stats: List[FileStat] = []
    index = 0
    while index < len(fields):
        parts = fields[index].split("\t")
        index += 1
        if len(parts) != 3:
            continue

        insertions, deletions, filename = parts
        if not filename:
            # renames list the source and destination as the next two fields
            if index + 1 >= len(fields):
                continue
            filename = fields[index + 1]
            index += 2

        stats.append(
            FileStat(
                filename=filename,
                insertions=int(insertions) if insertions.isdigit() else 0,
                deletions=int(deletions) if deletions.isdigit() else 0,
            )
        )
    return stats


def parse_path_list(output: str) -> List[str]:
    """Split NUL-terminated path output such as ``git ls-files -z``."""

    return [path for path in output.split("\0") if path]


class GitRepository:
    """Run git commands against a working tree.

    Every command goes through an injectable process runner so tests can
    replay canned git output.
    """

    def __init__(
        self,
        repo_path: Optional[str] = None,
        run_process: Optional[RunProcess] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._logger = logger or git_ai_commit_logger(__name__)
        self.repo_path = repo_path or os.getcwd()
        self._run_process = run_process or self._default_run_process

    # --- Public API ---
    def is_repository(self) -> bool:
        result = self._run(["git", "rev-parse", "--git-dir"])
        return result.returncode == 0

    def branch_name(self) -> str:
        return self._run_git_command(["git", "branch", "--show-current"])

    def last_commit_message(self) -> Optional[str]:
        result = self._run(["git", "log", "-1", "--pretty=%B"])
        if result.returncode != 0:
            self._logger.debug("No previous commit found")
            return None
        message = (result.stdout or "").strip()
        return message or None

    def list_changes(self, staged: bool) -> List[FileChange]:
        """Return staged (index) or unstaged (worktree) changes with their diff text."""

        base = ["git", "diff", "--cached"] if staged else ["git", "diff"]
        name_status = self._run_git_command(
            [*base, "--name-status", "-M", "-z"], strip=False
        )
        changes = parse_name_status(name_status, staged=staged)

        detailed = []
        for change in changes:
            paths = [change.old_path, change.path] if change.old_path else [change.path]
            diff = self._run_git_command([*base, "-M", "--", *paths], strip=False)
            detailed.append(change.model_copy(update={"diff": tuple(diff.splitlines())}))

        self._logger.debug(
            "Found %d %s changes", len(detailed), "staged" if staged else "unstaged"
        )
        return detailed

    def untracked_files(self) -> List[str]:
        output = self._run_git_command(
            ["git", "ls-files", "--others", "--exclude-standard", "-z"], strip=False
        )
        return parse_path_list(output)

    def diff_stat(self) -> DiffStat:
        staged = self._run_git_command(["git", "diff", "--cached", "--numstat", "-z"], strip=False)
        unstaged = self._run_git_command(["git", "diff", "--numstat", "-z"], strip=False)
        return DiffStat(file_stats=tuple(parse_numstat(staged) + parse_numstat(unstaged)))

    def collect(self) -> RepositoryInfo:
        """Take a snapshot of branch, changes, untracked files and statistics.

        Staged changes come first; unstaged changes follow unless the same
        path is already listed.
        """
        self._logger.debug("Collecting repository information in %s", self.repo_path)

        changes = self.list_changes(staged=True)
        seen = {change.path for change in changes}
        changes.extend(
            change for change in self.list_changes(staged=False) if change.path not in seen
        )

        return RepositoryInfo(
            branch=self.branch_name(),
            last_commit=self.last_commit_message(),
            changes=tuple(changes),
            untracked=tuple(self.untracked_files()),
            stats=self.diff_stat(),
        )

    def stage_all(self) -> None:
        """Stage modified and deleted files, then untracked files."""

        self._logger.info("Staging all unstaged changes")
        self._run_git_command(["git", "add", "--update"])
        self._run_git_command(["git", "add", "--all"])

    def commit(self, message: str) -> str:
        """Create a commit and return its short id."""

        parts = [part.strip() for part in message.strip().split("\n\n") if part.strip()]
        if not parts:
            raise VcsError("Commit message is empty. Aborting commit.")

        commit_command = ["git", "commit"]
        for part in parts:
            commit_command.extend(["-m", part])

        self._logger.info("Running git commit with generated message")
        self._run_git_command(commit_command)
        return self._run_git_command(["git", "rev-parse", "--short", "HEAD"])

    # --- Private helpers ---
    def _run(self, args: Sequence[str]) -> subprocess.CompletedProcess:
        self._logger.debug("Running git command: %s", " ".join(args))
        try:
            return self._run_process(args)
        except OSError as error:
            raise VcsError(f"Failed to run git: {error}") from error

    def _run_git_command(self, args: Sequence[str], *, strip: bool = True) -> str:
        result = self._run(args)

        if result.returncode != 0:
            stderr = result.stderr.strip() if result.stderr else ""
            stdout = result.stdout.strip() if result.stdout else ""
            message = stderr or stdout or f"exit code {result.returncode}"
            self._logger.error("%s failed: %s", " ".join(args[:2]), message)
            raise VcsError(message)

        stdout = result.stdout or ""
        self._logger.debug("Git output length: %d", len(stdout))
        return stdout.strip() if strip else stdout.rstrip("\n")

    def _default_run_process(
        self, args: Sequence[str]
    ) -> subprocess.CompletedProcess:
        return subprocess.run(
            args,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            cwd=self.repo_path,
        )
