"""Turn a change set into a bounded prompt fragment.

Selection is positional: files keep the order git listed them in and only the
first ``max_files`` are shown. Each shown diff keeps its first
``max_diff_lines`` lines. Nothing is re-ranked, so the same input always
yields the same fragment.
"""

from typing import List

from git_ai_commit.config import (
    OVERFLOW_MARKER,
    STAGED_HEADER,
    TRUNCATION_MARKER,
    UNSTAGED_HEADER,
)
from git_ai_commit.errors import ConfigInvalidError, EmptyChangeSetError
from git_ai_commit.schemas import ChangeSet, FileChange, PromptFragment, SummaryConfig


def summarize(changes: ChangeSet, config: SummaryConfig) -> PromptFragment:
    """Render at most ``config.max_files`` changes, each truncated to ``config.max_diff_lines``.

    SummaryConfig rejects bad limits when it is built; the check here covers
    instances made without validation, such as ``model_copy(update=...)``.

    Raises:
        ConfigInvalidError: If either limit is zero or negative.
        EmptyChangeSetError: If there are no changes at all.
    """
    if config.max_files <= 0 or config.max_diff_lines <= 0:
        raise ConfigInvalidError(
            f"max_files and max_diff_lines must be positive integers "
            f"(got {config.max_files} and {config.max_diff_lines})"
        )

    if not changes:
        raise EmptyChangeSetError("No changes detected in the repository.")

    shown = list(changes[: config.max_files])
    hidden = list(changes[config.max_files :])

    lines: List[str] = []
    current_group = None
    for change in shown:
        if change.staged is not current_group:
            if lines:
                lines.append("")
            lines.append(STAGED_HEADER if change.staged else UNSTAGED_HEADER)
            current_group = change.staged
        lines.extend(_render_change(change, config.max_diff_lines))

    if hidden:
        marker = OVERFLOW_MARKER.format(count=len(hidden))
        lines.append("")
        lines.append(f"{marker}: {', '.join(change.path for change in hidden)}")

    return PromptFragment(
        text="\n".join(lines),
        included=tuple(change.path for change in shown),
        omitted=tuple(change.path for change in hidden),
    )


def _render_change(change: FileChange, max_diff_lines: int) -> List[str]:
    lines = [f"  - {change.display()}"]

    if change.is_config_file():
        lines.append("    [CONFIG FILE]")
    elif change.is_test_file():
        lines.append("    [TEST FILE]")

    lines.extend(change.diff[:max_diff_lines])

    remaining = len(change.diff) - max_diff_lines
    if remaining > 0:
        lines.append(TRUNCATION_MARKER.format(count=remaining))

    return lines
