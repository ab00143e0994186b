# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Extract the details and examples sections from an api-linter rule page."""

from __future__ import annotations

from typing import Final

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from ..constants import GUIDANCE_PLACEHOLDER
from ..errors import EnrichmentError
from ..logging import get_logger

_LOGGER = get_logger(__name__)

_EXAMPLE_LABELS: Final[tuple[str, ...]] = ("Incorrect", "Correct")
_CODE_BLOCK_CLASS_PREFIX: Final[str] = "language-proto"


def _inline_markdown(node: Tag) -> str:
    """Render the inline content of ``node`` as markdown."""

    parts: list[str] = []
    for child in node.children:
        if isinstance(child, Comment):
            continue
        if isinstance(child, NavigableString):
            parts.append(str(child))
            continue
        if not isinstance(child, Tag):
            continue
        inner = _inline_markdown(child)
        if child.name == "code":
            parts.append(f"`{child.get_text()}`")
        elif child.name == "a":
            href = child.get("href")
            parts.append(f"[{inner}]({href})" if href else inner)
        elif child.name in {"em", "i"}:
            parts.append(f"*{inner}*")
        elif child.name in {"strong", "b"}:
            parts.append(f"**{inner}**")
        else:
            parts.append(inner)
    return "".join(parts)


def _collapse(text: str) -> str:
    return " ".join(text.split())


def _details(soup: BeautifulSoup) -> str | None:
    heading = soup.find("h2", id="details")
    if not isinstance(heading, Tag):
        return None
    paragraph = heading.find_next_sibling()
    if not isinstance(paragraph, Tag) or paragraph.name != "p":
        return None
    text = _collapse(_inline_markdown(paragraph))
    return text or None


def _is_code_block(tag: Tag) -> bool:
    classes = tag.get("class") or []
    return tag.name == "div" and any(str(name).startswith(_CODE_BLOCK_CLASS_PREFIX) for name in classes)


def _example_label(paragraph: Tag) -> str | None:
    label = paragraph.find(["strong", "b"])
    if not isinstance(label, Tag):
        return None
    name = label.get_text(strip=True)
    if name not in _EXAMPLE_LABELS or "code for this rule" not in _collapse(paragraph.get_text()):
        return None
    return name


def _examples(soup: BeautifulSoup) -> dict[str, str]:
    heading = soup.find("h2", id="examples")
    if not isinstance(heading, Tag):
        return {}
    found: dict[str, str] = {}
    for sibling in heading.find_next_siblings():
        if sibling.name == "h2":
            break
        if sibling.name != "p":
            continue
        label = _example_label(sibling)
        if label is None or label in found:
            continue
        block = sibling.find_next_sibling()
        if not isinstance(block, Tag) or not _is_code_block(block):
            continue
        code = block.find("code")
        if isinstance(code, Tag):
            found[label] = code.get_text().strip()
    return found


def _render(details: str | None, examples: dict[str, str]) -> str:
    markdown = ""
    if details:
        markdown += f"**Details:**\n{details}\n\n"
    if examples:
        markdown += "---\n\n"
        for label in _EXAMPLE_LABELS:
            if label in examples:
                markdown += f"#### {label} Example\n\n```proto\n{examples[label]}\n```\n\n"
    return markdown


def parse_rule_page(html: str) -> str:
    """Return the markdown guidance for ``html``, or ``""`` when nothing matched.

    Raises:
        EnrichmentError: If the document cannot be parsed.
    """

    try:
        soup = BeautifulSoup(html, "html.parser")
        return _render(_details(soup), _examples(soup))
    except (AssertionError, AttributeError, TypeError, ValueError) as exc:
        raise EnrichmentError(f"unparseable rule documentation: {exc}") from exc


def extract_guidance(html: str) -> str:
    """Convert a rule documentation page into hover-ready markdown.

    The first paragraph after the ``Details`` heading and the ``Incorrect`` /
    ``Correct`` proto snippets from the ``Examples`` section are kept.

    Args:
        html: Raw page body.

    Returns:
        str: Markdown guidance, or the generic placeholder when nothing could
        be extracted.
    """

    try:
        markdown = parse_rule_page(html)
    except EnrichmentError as exc:
        _LOGGER.warning("%s", exc)
        return GUIDANCE_PLACEHOLDER
    return markdown or GUIDANCE_PLACEHOLDER


__all__ = ["extract_guidance", "parse_rule_page"]
