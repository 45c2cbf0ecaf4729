"""Frontmatter splitting.

A content file may start with a YAML block delimited by "---" lines:

    ---
    page_title: Install
    description: Installing Consul
    ---
    # Hello

Everything after the closing delimiter is the body.
"""

from typing import Any

import yaml

from docpages.core.errors import ParseError

DELIMITER = "---"
_BOM = "\ufeff"


def split_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Split a content file into frontmatter and body.

    Args:
        text: Raw file text

    Returns:
        (frontmatter, body). Without a header block the frontmatter is empty
        and the body is the full input text.

    Raises:
        ParseError: If the header block is unclosed, is not valid YAML, or
            is not a mapping
    """
    source = text[1:] if text.startswith(_BOM) else text
    lines = source.splitlines(keepends=True)
    if not lines or not _is_delimiter(lines[0]):
        return {}, text

    for end, line in enumerate(lines[1:], start=1):
        if _is_delimiter(line):
            break
    else:
        raise ParseError("Frontmatter block is not closed (missing '---')")

    header = "".join(lines[1:end])
    body = "".join(lines[end + 1 :])

    try:
        data = yaml.safe_load(header)
    except yaml.YAMLError as e:
        raise ParseError(f"Invalid frontmatter: {e}") from e

    if data is None:
        return {}, body
    if not isinstance(data, dict):
        raise ParseError(f"Frontmatter must be a mapping, got {type(data).__name__}")

    return {str(key): value for key, value in data.items()}, body


def _is_delimiter(line: str) -> bool:
    return line.rstrip() == DELIMITER
