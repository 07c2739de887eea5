"""Report synthesis from analyzed workshop images."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from uuid import UUID

from workshop_scribe.domain.sessions import Report
from workshop_scribe.services.errors import (
    NoAnalyzedImagesError,
    ReportGenerationError,
    SessionNotFoundError,
)
from workshop_scribe.services.generation import GenerationClient
from workshop_scribe.services.store import SessionStore

REPORT_SECTIONS = (
    "Executive Summary",
    "Key Themes & Insights",
    "Actionable Findings",
    "Suggested Next Steps",
)

_SECTION_GUIDANCE = (
    "A high-level overview of the session's visible outcome.",
    "Group the sticky notes and points into thematic clusters.",
    "Specific takeaways derived from the content.",
    "Practical follow-up actions based on the workshop type.",
)

_logger = logging.getLogger(__name__)


def build_report_context(descriptions: Sequence[str]) -> str:
    """Join image analyses into one block labelled by 1-based position."""
    return "\n\n".join(
        f"Image {index} Analysis:\n{description}"
        for index, description in enumerate(descriptions, start=1)
    )


def build_report_prompt(descriptions: Sequence[str]) -> str:
    """Build the report-writing instruction around the image analyses."""
    sections = "\n".join(
        f"{index}. **{name}**: {guidance}"
        for index, (name, guidance) in enumerate(
            zip(REPORT_SECTIONS, _SECTION_GUIDANCE, strict=True), start=1
        )
    )
    return (
        "You are an expert Workshop Facilitator and Documentation Specialist.\n"
        "I have analyzed several photos from a workshop session.\n\n"
        "Here is the extracted data from the materials:\n"
        "---\n"
        f"{build_report_context(descriptions)}\n"
        "---\n\n"
        "Based on these inputs, generate a professional Workshop Summary Report "
        "in Markdown format.\n"
        "The report MUST include:\n"
        f"{sections}\n\n"
        "Formatting:\n"
        "- Use headers (#, ##).\n"
        "- Use bullet points.\n"
        "- Use bold text for emphasis.\n"
        "- Keep the tone professional, encouraging, and clear."
    )


@dataclass
class ReportService:
    """Synthesizes a session report, falling back to a faster model once."""

    client: GenerationClient
    store: SessionStore
    models: Sequence[str]

    async def synthesize(self, descriptions: Sequence[str]) -> str:
        """Return a Markdown report for the given image descriptions."""
        if not descriptions:
            raise NoAnalyzedImagesError("No analyzed images to report on")
        prompt = build_report_prompt(descriptions)
        for attempt, model in enumerate(self.models, start=1):
            try:
                markdown = await self.client.generate_text(model=model, prompt=prompt)
            except Exception as exc:
                _logger.warning(
                    "Report model %s failed (attempt %s/%s): %s",
                    model,
                    attempt,
                    len(self.models),
                    exc,
                )
                continue
            if markdown:
                return markdown
            _logger.warning("Report model %s returned an empty response", model)
        raise ReportGenerationError("Failed to generate comprehensive report")

    async def generate_for_session(self, session_id: UUID) -> Report:
        """Synthesize and store a report from the session's analyzed images."""
        session = self.store.require_session(session_id)
        descriptions = session.analyzed_descriptions()
        if not descriptions:
            raise NoAnalyzedImagesError(
                "Please wait for images to finish analyzing before generating "
                "a report."
            )
        self.store.update_session(
            session_id, lambda current: replace(current, report_in_progress=True)
        )
        try:
            markdown = await self.synthesize(descriptions)
        except Exception:
            self.store.update_session(
                session_id, lambda current: replace(current, report_in_progress=False)
            )
            raise
        report = Report(markdown=markdown, generated_at=datetime.now(tz=UTC))
        updated = self.store.update_session(
            session_id,
            lambda current: replace(current, report=report, report_in_progress=False),
        )
        if updated is None:
            raise SessionNotFoundError(session_id)
        _logger.info(
            "Generated report for session %s from %s image(s)",
            session_id,
            len(descriptions),
        )
        return report
