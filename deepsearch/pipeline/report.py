"""Final report synthesis and storage."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional

import aiofiles
import aiofiles.os
import structlog

from deepsearch.config.settings import Settings
from deepsearch.errors import ReportGenerationError
from deepsearch.pipeline.models import AnalysisResult, Report
from deepsearch.utils.date import compact_timestamp, utc_now
from deepsearch.utils.text import slugify, title_from_query

if TYPE_CHECKING:
    from deepsearch.analysis.service import AnalysisService
    from deepsearch.database.repository import SessionStore

logger = structlog.get_logger(__name__)


@dataclass
class ReportConfig:
    """Report synthesizer options."""

    reports_dir: str = "./reports"
    auto_save: bool = False
    slug_length: int = 50
    title_words: int = 8

    @classmethod
    def from_settings(cls, settings: Settings) -> "ReportConfig":
        return cls(reports_dir=settings.reports_dir, auto_save=settings.reports_auto_save)


def report_filename(query: str, moment: datetime, slug_length: int = 50) -> str:
    """``YYYYMMDDHHMM_<slug>.md`` for a query at ``moment``."""
    return f"{compact_timestamp(moment)}_{slugify(query, slug_length)}.md"


class ReportSynthesizer:
    """Turns consolidated analysis into a markdown report."""

    def __init__(
        self,
        analysis: "AnalysisService",
        store: Optional["SessionStore"] = None,
        config: ReportConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.analysis = analysis
        self.store = store
        self.config = config or ReportConfig()
        self.clock = clock

    async def synthesize(
        self,
        query: str,
        analysis: AnalysisResult,
        session_id: str | None = None,
    ) -> Report:
        """
        Generate the report for a run.

        Args:
            query: Research query
            analysis: Consolidated analysis of the run
            session_id: Persist the report under this session when set

        Returns:
            The report

        Raises:
            ReportGenerationError: If the model service cannot produce the report
        """
        logger.info("Generating final report", sources=analysis.successful_analyses)
        try:
            content = await self.analysis.synthesize_report(
                query, analysis.consolidated.model_dump(mode="json")
            )
        except Exception as e:
            logger.error("Report generation failed", error=str(e))
            raise ReportGenerationError(f"Report generation failed: {e}") from e

        moment = self.clock()
        filename = report_filename(query, moment, self.config.slug_length)
        title = title_from_query(query, self.config.title_words)

        file_path = None
        if self.config.auto_save:
            file_path = await self.save(filename, content)

        report = Report(
            title=title,
            content=content,
            filename=filename,
            file_path=file_path,
            query=query,
            timestamp=moment,
            source_count=analysis.total_sources,
            successful_analyses=analysis.successful_analyses,
        )

        if session_id and self.store is not None:
            await self.store.save_report(
                session_id,
                title=report.title,
                content=report.content,
                filename=report.filename,
                file_path=report.file_path,
                format=report.format,
                metadata={
                    "query": query,
                    "timestamp": moment.isoformat(),
                    "source_count": report.source_count,
                    "successful_analyses": report.successful_analyses,
                },
            )

        logger.info("Report generated", filename=filename)
        return report

    async def save(self, filename: str, content: str) -> str:
        """Write report markdown under the reports directory and return its path."""
        directory = Path(self.config.reports_dir)
        await aiofiles.os.makedirs(directory, exist_ok=True)
        path = directory / filename

        async with aiofiles.open(path, "w", encoding="utf-8") as f:
            await f.write(content)

        logger.info("Report saved to disk", path=str(path))
        return str(path)
