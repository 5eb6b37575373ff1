"""
Test Quality Directive Composer
===============================
"""
from core.quality import QUALITY_DIRECTIVES, compose_quality_clause
from core.schemas import QualityFlags

FRAGMENTS = [fragment for _, fragment in QUALITY_DIRECTIVES]


def test_no_flags_gives_empty_clause():
    assert compose_quality_clause(QualityFlags.none()) == ""


def test_all_flags_in_declaration_order():
    clause = compose_quality_clause(QualityFlags())
    positions = [clause.index(fragment) for fragment in FRAGMENTS]
    assert positions == sorted(positions)
    assert clause == ". ".join(FRAGMENTS)


def test_only_active_flags_are_listed():
    flags = QualityFlags(realistic=False, statistical=True, complete=False, noise_free=True)
    assert compose_quality_clause(flags) == (
        "maintain correct field correlations. no typos or formatting inconsistencies"
    )


def test_compose_is_idempotent():
    flags = QualityFlags(realistic=True, statistical=False, complete=True, noise_free=False)
    assert compose_quality_clause(flags) == compose_quality_clause(flags)


def test_noise_free_accepts_camel_case_alias():
    flags = QualityFlags.model_validate(
        {"realistic": False, "statistical": False, "complete": False, "noiseFree": True}
    )
    assert compose_quality_clause(flags) == "no typos or formatting inconsistencies"
