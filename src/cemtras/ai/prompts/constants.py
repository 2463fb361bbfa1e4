from enum import Enum


class SectionKind(str, Enum):
    """Display category of a section in a formatted response."""

    PROBLEM = "problem"
    ANALYSIS = "analysis"
    SOLUTION = "solution"
    SAFETY = "safety"
    INFO = "info"


# Headers the model is instructed to emit, in order
PROBLEM_STATEMENT = "Problem Statement"
ANALYSIS = "Analysis"
SOLUTION = "Solution / Recommendation"
BEST_PRACTICES = "Best Practices / Safety Notes"

RESPONSE_SECTIONS: tuple[str, ...] = (
    PROBLEM_STATEMENT,
    ANALYSIS,
    SOLUTION,
    BEST_PRACTICES,
)

# Keyword -> kind, checked in order against a lower-cased header
SECTION_KEYWORDS: tuple[tuple[str, SectionKind], ...] = (
    ("problem", SectionKind.PROBLEM),
    ("solution", SectionKind.SOLUTION),
    ("recommendation", SectionKind.SOLUTION),
    ("analysis", SectionKind.ANALYSIS),
    ("safety", SectionKind.SAFETY),
    ("best practices", SectionKind.SAFETY),
)

SECTION_ICONS: dict[SectionKind, str] = {
    SectionKind.PROBLEM: "alert-triangle",
    SectionKind.ANALYSIS: "info",
    SectionKind.SOLUTION: "check-circle",
    SectionKind.SAFETY: "alert-triangle",
    SectionKind.INFO: "info",
}
