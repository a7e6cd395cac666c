import re
import textwrap
from typing import List

from git_ai_commit.config import MAX_LINE_LENGTH


BULLET_PREFIXES = ("- ", "* ", "+ ")

_THINK_BLOCK = re.compile(r"<think>.*?</think>", flags=re.DOTALL | re.IGNORECASE)
_CODE_FENCE = re.compile(r"^```[\w-]*\s*\n(.*?)\n?```$", flags=re.DOTALL)
_QUOTES = ('"', "'", "`")


def clean_model_output(text: str) -> str:
    """Strip reasoning blocks, markdown fences and wrapping quotes from a reply."""

    if not text:
        return ""

    cleaned = _THINK_BLOCK.sub("", text).strip()

    fenced = _CODE_FENCE.match(cleaned)
    if fenced:
        cleaned = fenced.group(1).strip()

    for quote in _QUOTES:
        if len(cleaned) > 1 and cleaned.startswith(quote) and cleaned.endswith(quote):
            cleaned = cleaned[1:-1].strip()
            break

    return cleaned


def wrap_commit_message(commit_message: str, width: int = MAX_LINE_LENGTH) -> str:
    """Wrap commit messages so that no line exceeds *width* characters.

    The subject line is wrapped on its own; body paragraphs are reflowed and
    bullet items keep a hanging indent.
    """

    if not commit_message:
        return commit_message

    wrapped_lines: List[str] = []
    paragraph_lines: List[str] = []

    def flush_paragraph() -> None:
        if not paragraph_lines:
            return

        paragraph = " ".join(line.strip() for line in paragraph_lines).strip()
        if paragraph:
            wrapped_lines.extend(textwrap.wrap(paragraph, width=width) or [""])
        else:
            wrapped_lines.append("")
        paragraph_lines.clear()

    lines = commit_message.strip().splitlines()
    subject, body = lines[0].strip(), lines[1:]
    wrapped_lines.extend(textwrap.wrap(subject, width=width) or [""])

    for line in body:
        stripped = line.lstrip()
        if not stripped:
            flush_paragraph()
            wrapped_lines.append("")
            continue

        indent = line[: len(line) - len(stripped)]
        bullet_prefix = next(
            (prefix for prefix in BULLET_PREFIXES if stripped.startswith(prefix)),
            None,
        )

        if bullet_prefix is not None:
            flush_paragraph()
            text = stripped[len(bullet_prefix) :].strip()
            initial_indent = indent + bullet_prefix
            subsequent_indent = indent + " " * len(bullet_prefix)
            wrapped_lines.extend(
                textwrap.wrap(
                    text,
                    width=width,
                    initial_indent=initial_indent,
                    subsequent_indent=subsequent_indent,
                )
                or [initial_indent.rstrip()]
            )
            continue

        paragraph_lines.append(line)

    flush_paragraph()

    return "\n".join(wrapped_lines)
