"""Packs selected project files into the context block sent ahead of a user message.

Files are rendered in selection order until the character budget is
exhausted.  Individual files are truncated to a per-file cap so that a
single large file cannot consume the entire budget.  A block that does not
fit is dropped whole, never cut, and nothing after it is considered.
"""

from __future__ import annotations

from typing import Callable, Iterable

DEFAULT_BUDGET = 8000
PER_FILE_MAX_CHARS = 2000

HEADER = (
    "=== PROJECT CONTEXT ===\n"
    "Here are the relevant files from the user's project:\n\n"
)
FOOTER = "=== END PROJECT CONTEXT ===\n\n"
LIMIT_NOTICE = "... (More files available but context limit reached)\n\n"
TRUNCATION_MARKER = "\n... [File truncated]\n"
READ_ERROR = "[Error: Could not read file]"
SEPARATOR = "=" * 40


def render_file_block(path: str, content: str | None, per_file_max: int = PER_FILE_MAX_CHARS) -> str:
    """Format one file as a labelled block; ``None`` content renders a read error."""
    if content is None:
        return f"FILE: {path}\n{READ_ERROR}\n\n"

    if len(content) > per_file_max:
        content = content[:per_file_max] + TRUNCATION_MARKER

    return f"FILE: {path}\n{SEPARATOR}\n{content}\n{SEPARATOR}\n\n"


def pack(
    selection: Iterable[str],
    read: Callable[[str], str | None],
    budget: int = DEFAULT_BUDGET,
    per_file_max: int = PER_FILE_MAX_CHARS,
) -> str:
    """Build the context string for *selection* within *budget* chars.

    *read* returns a file's text or ``None`` when it is unavailable.  The
    budget applies to the file blocks; header, footer and the limit notice
    are fixed overhead.  Returns an empty string for an empty selection.
    """
    if budget <= 0:
        raise ValueError(f"budget must be positive, got {budget}")

    paths = list(selection)
    if not paths:
        return ""

    sections: list[str] = [HEADER]
    used = 0

    for path in paths:
        block = render_file_block(path, read(path), per_file_max)
        if used + len(block) > budget:
            sections.append(LIMIT_NOTICE)
            break
        sections.append(block)
        used += len(block)

    sections.append(FOOTER)
    return "".join(sections)
