"""Post-processing of model output into labeled display sections.

Responses are expected to carry their own bold section headers (see
``cemtras.ai.prompts.builder``). A header is a line holding only ``**Title**``;
bold text inside a paragraph is left alone. Output that does not follow the
grammar is still returned in full as one unlabeled section.
"""

import re

from cemtras.ai.prompts.constants import (
    RESPONSE_SECTIONS,
    SECTION_ICONS,
    SECTION_KEYWORDS,
    SectionKind,
)
from cemtras.ai.prompts.schemas import FormattedResponse, ResponseSection

HEADER_PATTERN = re.compile(r"^[ \t]*\*\*(?P<title>[^*\n]+?):?\*\*[ \t]*:?[ \t]*$", re.MULTILINE)
BULLET_PATTERN = re.compile(r"^\s*[-•]\s*(?P<item>.+?)\s*$")

SECTION_GRAMMAR = re.compile(
    r"\s*".join(
        rf"^[ \t]*\*\*{re.escape(header)}:?\*\*[ \t]*:?[ \t]*$[\s\S]*?"
        for header in RESPONSE_SECTIONS
    ),
    re.MULTILINE,
)


def classify_section(title: str) -> SectionKind:
    """Map a header to its display kind; unknown headers fall back to INFO."""
    lowered = title.lower()
    for keyword, kind in SECTION_KEYWORDS:
        if keyword in lowered:
            return kind
    return SectionKind.INFO


def matches_section_grammar(text: str) -> bool:
    """Return True when all expected headers appear, in order, on their own lines."""
    return SECTION_GRAMMAR.search(text) is not None


def _bullets(content: str) -> list[str]:
    items = []
    for line in content.splitlines():
        match = BULLET_PATTERN.match(line)
        if match:
            items.append(match.group("item"))
    return items


def _section(title: str | None, content: str) -> ResponseSection:
    kind = classify_section(title) if title else SectionKind.INFO
    return ResponseSection(
        kind=kind,
        title=title,
        icon=SECTION_ICONS[kind],
        content=content,
        bullets=_bullets(content),
    )


def format_response(text: str) -> FormattedResponse:
    """Split model output into sections for display."""
    headers = list(HEADER_PATTERN.finditer(text))
    if not headers:
        return FormattedResponse(
            sections=[_section(None, text.strip())] if text.strip() else [],
            is_structured=False,
        )

    sections = []
    preamble = text[: headers[0].start()].strip()
    if preamble:
        sections.append(_section(None, preamble))

    for index, header in enumerate(headers):
        end = headers[index + 1].start() if index + 1 < len(headers) else len(text)
        body = text[header.end() : end].strip()
        sections.append(_section(header.group("title").strip(), body))

    return FormattedResponse(
        sections=sections,
        is_structured=matches_section_grammar(text),
    )
