"""
Test Tabular Generation Orchestrator
====================================
"""
import pytest

from core.errors import EmptyPromptError, QuotaExhaustedError, RateLimitedError
from core.formats import instruction_for
from core.quality import QUALITY_DIRECTIVES
from core.schemas import QualityFlags, SourceMode, TabularRequest, WebSearchResult
from providers.firecrawl import format_context
from generators.tabular import (
    CLOSING_DIRECTIVE,
    TabularGenerator,
    build_system_instruction,
    strip_code_fences,
)
from storage.memory import InMemoryHistoryStore
from tests.conftest import FakeFetcher, FakeTextProvider

WEB_SECTION = "real-world reference data"


def test_strip_fenced_json():
    assert strip_code_fences('```json\n[{"a":1}]\n```') == '[{"a":1}]'


def test_strip_fence_without_language_and_whitespace():
    assert strip_code_fences("\n\n```\nid,name\n1,Ann\n```  \n") == "id,name\n1,Ann"


def test_unfenced_text_is_only_trimmed():
    assert strip_code_fences("  id,name\n1,Ann \n") == "id,name\n1,Ann"


def test_inner_backticks_are_kept():
    text = "name,snippet\nx,```inline```"
    assert strip_code_fences(text) == text


def test_backticks_opening_a_data_line_are_kept():
    assert strip_code_fences("```a```,b\n1,2") == "```a```,b\n1,2"
    assert strip_code_fences("a,b\n1,```x```") == "a,b\n1,```x```"


def test_crlf_fence_is_unwrapped():
    assert strip_code_fences("```yaml\r\n- a: 1\r\n```") == "- a: 1"


def test_null_quality_options_omit_quality_section():
    provider = FakeTextProvider()
    request = TabularRequest.model_validate({"prompt": "x", "qualityOptions": None})

    TabularGenerator(provider).generate(request)

    assert request.quality is None
    assert "Quality requirements" not in provider.calls[0][0]["content"]


def test_end_to_end_instruction_for_synthetic_csv():
    provider = FakeTextProvider(reply="```csv\nid,name\n1,Ann\n```")
    fetcher = FakeFetcher([WebSearchResult(title="unused", content="unused")])
    generator = TabularGenerator(provider, fetcher)
    request = TabularRequest(
        prompt="50 employee records",
        format="csv",
        row_count=50,
        quality=QualityFlags(),
        source_mode=SourceMode.SYNTHETIC,
    )

    artifact = generator.generate(request)

    system, user = provider.calls[0]
    assert system["role"] == "system"
    assert "exactly 50 rows" in system["content"]
    assert instruction_for("csv") in system["content"]
    for _, fragment in QUALITY_DIRECTIVES:
        assert fragment in system["content"]
    assert WEB_SECTION not in system["content"]
    assert system["content"].endswith(CLOSING_DIRECTIVE)
    assert user == {"role": "user", "content": "Generate a dataset: 50 employee records"}
    assert fetcher.queries == []

    assert artifact.content == "id,name\n1,Ann"
    assert artifact.format == "csv"
    assert artifact.row_count == 50


@pytest.mark.parametrize("mode", [SourceMode.WEB, SourceMode.HYBRID])
def test_web_modes_include_truncated_context(mode):
    results = [WebSearchResult(title=f"T{i}", content="z" * 800) for i in range(5)]
    fetcher = FakeFetcher(results)
    provider = FakeTextProvider()
    generator = TabularGenerator(provider, fetcher)

    generator.generate(TabularRequest(prompt="prices", source_mode=mode))

    system = provider.calls[0][0]["content"]
    assert fetcher.queries == ["prices"]
    assert WEB_SECTION in system
    assert "Source: T0\n" in system
    context = format_context(results)
    assert len(context) == 3000
    assert context in system
    assert "Source: T4" not in system


def test_empty_web_results_leave_no_context_section():
    provider = FakeTextProvider()
    generator = TabularGenerator(provider, FakeFetcher([]))

    generator.generate(TabularRequest(prompt="x", source_mode=SourceMode.WEB))

    assert WEB_SECTION not in provider.calls[0][0]["content"]


def test_no_quality_flags_omit_quality_section():
    instruction = build_system_instruction(20, "json", QualityFlags.none())
    assert "Quality requirements" not in instruction
    assert instruction_for("json") in instruction


def test_unknown_format_uses_csv_instruction():
    provider = FakeTextProvider()
    artifact = TabularGenerator(provider).generate(TabularRequest(prompt="x", format="parquet"))
    assert instruction_for("csv") in provider.calls[0][0]["content"]
    assert artifact.format == "parquet"


def test_row_count_is_clamped_before_dispatch():
    provider = FakeTextProvider()
    TabularGenerator(provider).generate(TabularRequest(prompt="x", row_count=5000))
    assert "exactly 500 rows" in provider.calls[0][0]["content"]


def test_blank_prompt_fails_before_any_call():
    provider = FakeTextProvider()
    fetcher = FakeFetcher()
    with pytest.raises(EmptyPromptError):
        TabularGenerator(provider, fetcher).generate(TabularRequest(prompt="   ", source_mode=SourceMode.WEB))
    assert provider.calls == []
    assert fetcher.queries == []


@pytest.mark.parametrize("error", [RateLimitedError(), QuotaExhaustedError()])
def test_collaborator_errors_propagate(error):
    generator = TabularGenerator(FakeTextProvider(error=error))
    with pytest.raises(type(error)):
        generator.generate(TabularRequest(prompt="x"))


def test_generate_and_record_appends_history():
    history = InMemoryHistoryStore()
    generator = TabularGenerator(FakeTextProvider(reply="a\n1"), history=history)
    request = TabularRequest(prompt="tiny", format="csv", row_count=10, source_mode=SourceMode.SYNTHETIC)

    outcome = generator.generate_and_record(request, owner_id="user-1")

    assert outcome.persistence_error is None
    record = history.records[0]
    assert outcome.record_id == record.id
    assert (record.owner_id, record.prompt, record.data, record.row_count) == ("user-1", "tiny", "a\n1", 10)


def test_history_failure_keeps_artifact():
    generator = TabularGenerator(FakeTextProvider(reply="a\n1"), history=InMemoryHistoryStore(fail=True))

    outcome = generator.generate_and_record(TabularRequest(prompt="x"), owner_id="user-1")

    assert outcome.artifact.content == "a\n1"
    assert outcome.record_id is None
    assert outcome.persistence_error == "History store unavailable"
