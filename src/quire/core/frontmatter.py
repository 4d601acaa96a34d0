"""YAML front matter parsing.

A document may start with a block delimited by ``---`` lines::

    ---
    title: "Paging with Spring Boot"
    categories: ["Spring Boot"]
    ---
    Body text...

Documents without such a block are plain Markdown with empty metadata.
"""

from pathlib import Path
from typing import Any

import yaml

from quire.errors import MalformedFrontMatterError

DELIMITER = "---"
CLOSING_DELIMITERS = ("---", "...")


def parse_front_matter(text: str, path: Path | None = None) -> tuple[dict[str, Any], str]:
    """Split raw document text into metadata and body.

    Args:
        text: Raw document text
        path: Source path, used in error messages

    Returns:
        Tuple of (metadata map, body string)

    Raises:
        MalformedFrontMatterError: If the block is unterminated, is not valid
            YAML, or does not hold a mapping
    """
    text = text.removeprefix("\ufeff")
    lines = text.splitlines(keepends=True)

    if not lines or lines[0].rstrip("\r\n").rstrip() != DELIMITER:
        return {}, text

    closing_idx: int | None = None
    for idx in range(1, len(lines)):
        if lines[idx].rstrip("\r\n").rstrip() in CLOSING_DELIMITERS:
            closing_idx = idx
            break

    if closing_idx is None:
        raise MalformedFrontMatterError("front matter is missing closing '---'", path)

    raw_yaml = "".join(lines[1:closing_idx])
    body = "".join(lines[closing_idx + 1 :])

    # Impossible timestamps (2020-13-45) surface as ValueError, not YAMLError
    try:
        metadata = yaml.safe_load(raw_yaml)
    except (yaml.YAMLError, ValueError) as e:
        raise MalformedFrontMatterError(f"invalid YAML in front matter: {e}", path) from e

    if metadata is None:
        return {}, body

    if not isinstance(metadata, dict):
        raise MalformedFrontMatterError(
            f"front matter must be a mapping, got {type(metadata).__name__}",
            path,
        )

    return {str(key): value for key, value in metadata.items()}, body


def dump_front_matter(metadata: dict[str, Any]) -> str:
    """Serialize metadata into a delimited front matter block.

    Args:
        metadata: Front matter map

    Returns:
        Block including both delimiters and a trailing newline
    """
    if not metadata:
        return f"{DELIMITER}\n{DELIMITER}\n"
    dumped = yaml.safe_dump(metadata, allow_unicode=True, sort_keys=False)
    return f"{DELIMITER}\n{dumped}{DELIMITER}\n"
