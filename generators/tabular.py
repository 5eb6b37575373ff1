"""
Tabular Generation Orchestrator

Builds the system instruction from format, quality and optional web
context, runs one generation call and sanitizes the response into a
TabularArtifact.
"""
import logging
import re
from typing import Optional

from core.errors import EmptyPromptError, PersistenceError
from core.formats import instruction_for
from core.quality import compose_quality_clause
from core.schemas import (
    DatasetRecord,
    GenerationOutcome,
    QualityFlags,
    TabularArtifact,
    TabularRequest,
)
from providers.ai_gateway import AIGatewayProvider
from providers.firecrawl import WebContextFetcher, format_context
from storage.base import HistoryStore

logger = logging.getLogger(__name__)

CLOSING_DIRECTIVE = (
    "CRITICAL: Return ONLY the raw data in the requested format. "
    "No explanations, no markdown code fences, no extra text."
)

_ENCLOSING_FENCE = re.compile(r"```[\w+-]*[ \t]*\r?\n(.*?)\r?\n?[ \t]*```", re.S)


def strip_code_fences(text: str) -> str:
    """
    Remove an enclosing ``` fence (with optional language tag) and trim.

    Example:
        >>> strip_code_fences('```json\\n[{"a":1}]\\n```')
        '[{"a":1}]'
    """
    text = (text or "").strip()
    match = _ENCLOSING_FENCE.fullmatch(text)
    if match:
        return match.group(1).strip()
    return text


def build_system_instruction(
    row_count: int,
    fmt: str,
    quality: Optional[QualityFlags] = None,
    web_context: str = ""
) -> str:
    """
    Compose the system message for a tabular generation call

    Args:
        row_count: Exact number of rows requested
        fmt: Output format id (unknown means CSV)
        quality: Quality toggles (None means no quality clause)
        web_context: Already truncated reference data, may be empty

    Returns:
        System instruction text
    """
    parts = [
        f"You are a dataset generator. Generate exactly {row_count} rows of data.",
        instruction_for(fmt),
    ]

    clause = compose_quality_clause(quality) if quality else ""
    if clause:
        parts.append(f"Quality requirements: {clause}.")

    if web_context:
        parts.append(
            "Use the following real-world reference data to make your output more realistic:\n"
            f"{web_context}"
        )

    parts.append(CLOSING_DIRECTIVE)
    return "\n\n".join(parts)


class TabularGenerator:
    """
    Orchestrates one tabular dataset generation

    Example:
        >>> generator = TabularGenerator(provider, fetcher)
        >>> artifact = generator.generate(TabularRequest(prompt="50 employee records"))
    """

    def __init__(
        self,
        provider: AIGatewayProvider,
        fetcher: Optional[WebContextFetcher] = None,
        history: Optional[HistoryStore] = None
    ):
        """
        Args:
            provider: Text generation client
            fetcher: Web search client, used for web and hybrid source modes
            history: Dataset history sink for generate_and_record
        """
        self.provider = provider
        self.fetcher = fetcher
        self.history = history

    def fetch_context(self, request: TabularRequest) -> str:
        if not request.source_mode.uses_web or self.fetcher is None:
            return ""
        results = self.fetcher.search(request.prompt)
        return format_context(results)

    def generate(self, request: TabularRequest) -> TabularArtifact:
        """
        Generate a dataset

        Raises:
            EmptyPromptError: Prompt is blank
            RateLimitedError, QuotaExhaustedError, UpstreamGenerationError
        """
        prompt = request.prompt.strip()
        if not prompt:
            raise EmptyPromptError()

        web_context = self.fetch_context(request)
        system_instruction = build_system_instruction(
            row_count=request.row_count,
            fmt=request.format,
            quality=request.quality,
            web_context=web_context,
        )

        logger.info(
            f"Generating {request.row_count} rows as {request.format} "
            f"(source={request.source_mode.value}, context={len(web_context)} chars)"
        )
        raw = self.provider.chat([
            {"role": "system", "content": system_instruction},
            {"role": "user", "content": f"Generate a dataset: {prompt}"},
        ])

        return TabularArtifact(
            content=strip_code_fences(raw),
            format=request.format,
            row_count=request.row_count,
        )

    def generate_and_record(self, request: TabularRequest, owner_id: str) -> GenerationOutcome:
        """
        Generate, then append the result to dataset history.

        A failed history write is reported in the outcome; the artifact is
        still returned.
        """
        artifact = self.generate(request)
        outcome = GenerationOutcome(artifact=artifact)
        if self.history is None:
            return outcome

        record = DatasetRecord(
            owner_id=owner_id,
            prompt=request.prompt,
            format=artifact.format,
            data=artifact.content,
            row_count=artifact.row_count,
            source_mode=request.source_mode,
        )
        try:
            self.history.insert(record)
            outcome.record_id = record.id
        except PersistenceError as e:
            logger.error(f"Saving dataset history failed: {e}")
            outcome.persistence_error = e.message
        return outcome
