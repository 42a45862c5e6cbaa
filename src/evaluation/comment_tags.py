"""Tagged comment blocks stored inside a single free-text field.

A comment is a sequence of blocks separated by one or more blank lines. An
internal-survey block starts with ``[[internal]]`` or ``[[internal|<category>]]``;
anything else is legacy plain text. The category may not contain ``]`` or ``|``.

    >>> encode_block("Limpieza", "mejorar")
    '[[internal|Limpieza]] mejorar'
    >>> decode_blocks("[[internal|Limpieza]] mejorar\\n\\nviejo").by_category
    {'Limpieza': 'mejorar'}
"""
# evaluation/comment_tags.py
import logging
import re
from typing import NamedTuple

logger = logging.getLogger(__name__)

INTERNAL_TAG = "internal"
BLOCK_SEPARATOR = "\n\n"

_BLANK_LINES = re.compile(r"\n\s*\n")
_INTERNAL_BLOCK = re.compile(r"^\[\[internal(?:\|([^\]|]*))?\]\]\s*(.*)$", re.DOTALL)
_ANY_TAG = re.compile(r"^\[\[(.+?)\]\]\s*(.*)$", re.DOTALL)
_HAS_INTERNAL_TAG = re.compile(r"\[\[internal(\||\]\])")
_RESERVED_CATEGORY_CHARS = "]|"


class CommentBlock(NamedTuple):
    raw: str
    body: str
    category: str | None = None
    tagged: bool = False


class DecodedComment(NamedTuple):
    by_category: dict[str, str]
    uncategorized: str


def is_valid_category(category: str) -> bool:
    """Whether `category` can appear in a tag and be read back unchanged."""
    return not any(ch in category for ch in _RESERVED_CATEGORY_CHARS)


def encode_block(category: str | None, text: str) -> str:
    """Encode one comment as an internal block.

    Blank lines inside `text` are collapsed to single line breaks so the block
    is read back as one block.

    Raises:
        ValueError: `category` contains ``]`` or ``|``.
    """
    safe_category = (category or "").strip()
    if not is_valid_category(safe_category):
        raise ValueError(f"Category {safe_category!r} cannot contain ']' or '|'")
    trimmed = _BLANK_LINES.sub("\n", (text or "").strip())
    if not trimmed:
        return ""
    if safe_category:
        return f"[[{INTERNAL_TAG}|{safe_category}]] {trimmed}"
    return f"[[{INTERNAL_TAG}]] {trimmed}"


def split_blocks(comment: str) -> list[str]:
    return [block.strip() for block in _BLANK_LINES.split(comment or "") if block.strip()]


def parse_block(block: str) -> CommentBlock:
    raw = block.strip()
    match = _INTERNAL_BLOCK.match(raw)
    if match:
        category = (match.group(1) or "").strip() or None
        return CommentBlock(raw=raw, body=match.group(2).strip(), category=category, tagged=True)
    if raw.startswith("[["):
        # MalformedTagBlock: unknown or broken tag, kept as plain text
        logger.warning("Unrecognized comment tag, keeping block as plain text: %.40r", raw)
    return CommentBlock(raw=raw, body=raw)


def parse_blocks(comment: str) -> list[CommentBlock]:
    return [parse_block(block) for block in split_blocks(comment)]


def decode_blocks(comment: str) -> DecodedComment:
    """Split a stored comment into per-category text and leftover text.

    A category tagged more than once keeps its last block.
    """
    by_category: dict[str, str] = {}
    uncategorized: list[str] = []
    for block in parse_blocks(comment):
        if block.category:
            by_category[block.category] = block.body
        elif block.body:
            uncategorized.append(block.body)
    return DecodedComment(by_category, BLOCK_SEPARATOR.join(uncategorized))


def comment_for_category(comment: str, category: str) -> str:
    """Text to pre-fill when an evaluator reopens one internal category.

    Untagged text is offered only while no category has a block of its own.
    """
    decoded = decode_blocks(comment)
    if category in decoded.by_category:
        return decoded.by_category[category]
    return "" if decoded.by_category else decoded.uncategorized


def has_internal_tags(comment: str) -> bool:
    return bool(_HAS_INTERNAL_TAG.search(comment or ""))


def parse_any_tag(block: str) -> tuple[str, str] | None:
    """Return ``(tag, text)`` for a block that starts with any ``[[...]]`` tag."""
    match = _ANY_TAG.match(block.strip())
    if not match:
        return None
    return match.group(1), match.group(2).strip()


def join_blocks(blocks: list[str]) -> str:
    return BLOCK_SEPARATOR.join(block for block in blocks if block)
