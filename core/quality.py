"""
Quality Directive Composer
==========================

Turns quality toggles into the clause appended to the system instruction.
"""
from typing import List

from core.schemas import QualityFlags

# Declaration order is output order.
QUALITY_DIRECTIVES = (
    ("realistic", "match real-world value distributions"),
    ("statistical", "maintain correct field correlations"),
    ("complete", "no missing or empty values permitted"),
    ("noise_free", "no typos or formatting inconsistencies"),
)


def active_directives(flags: QualityFlags) -> List[str]:
    return [fragment for name, fragment in QUALITY_DIRECTIVES if getattr(flags, name)]


def compose_quality_clause(flags: QualityFlags) -> str:
    """
    Join the fragments of all active flags.

    Args:
        flags: Quality toggles

    Returns:
        Fragments joined with ". ", or "" when no flag is active
    """
    return ". ".join(active_directives(flags))
