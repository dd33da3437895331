"""Tests for report synthesis."""

from datetime import datetime, timezone

import aiofiles.os
import pytest

from deepsearch.errors import AnalysisServiceError, ReportGenerationError
from deepsearch.pipeline.consolidator import consolidate
from deepsearch.pipeline.models import AnalysisResult
from deepsearch.pipeline.report import ReportConfig, ReportSynthesizer, report_filename
from deepsearch.utils.text import slugify, title_from_query
from tests.mocks import InMemorySessionStore, ScriptedAnalysisService

MOMENT = datetime(2026, 10, 16, 12, 30, tzinfo=timezone.utc)


def empty_analysis(query="query"):
    return AnalysisResult(consolidated=consolidate(query, []), total_sources=4, successful_analyses=0)


def test_slugify():
    assert slugify("What is Quantum Computing?") == "what_is_quantum_computing"
    assert slugify("Café   crème, s'il vous plaît") == "cafe_creme_sil_vous_plait"
    assert len(slugify("word " * 40)) == 50


def test_title_from_query():
    assert title_from_query("what is QUANTUM computing") == "What Is Quantum Computing"
    assert title_from_query("one two three four five six seven eight nine ten") == (
        "One Two Three Four Five Six Seven Eight"
    )


def test_report_filename():
    assert report_filename("What is Quantum Computing?", MOMENT) == "202610161230_what_is_quantum_computing.md"


@pytest.mark.asyncio
async def test_synthesize_builds_report():
    analysis = ScriptedAnalysisService(report="# Quantum\n\nFindings")
    synthesizer = ReportSynthesizer(analysis, clock=lambda: MOMENT)

    report = await synthesizer.synthesize("what is quantum computing", empty_analysis())

    assert report.title == "What Is Quantum Computing"
    assert report.content == "# Quantum\n\nFindings"
    assert report.filename == "202610161230_what_is_quantum_computing.md"
    assert report.file_path is None
    assert report.format == "markdown"
    assert report.source_count == 4
    assert report.timestamp == MOMENT
    assert analysis.report_calls[0]["query"] == "query"


@pytest.mark.asyncio
async def test_synthesize_saves_file_and_session(tmp_path):
    store = InMemorySessionStore()
    session_id = await store.create_session("quantum")
    synthesizer = ReportSynthesizer(
        ScriptedAnalysisService(report="# Report"),
        store=store,
        config=ReportConfig(reports_dir=str(tmp_path / "reports"), auto_save=True),
        clock=lambda: MOMENT,
    )

    report = await synthesizer.synthesize("quantum", empty_analysis(), session_id=session_id)

    saved = tmp_path / "reports" / "202610161230_quantum.md"
    assert report.file_path == str(saved)
    assert saved.read_text(encoding="utf-8") == "# Report"
    assert store.reports[0]["session_id"] == session_id
    assert store.reports[0]["filename"] == report.filename


@pytest.mark.asyncio
async def test_synthesize_failure_raises_report_error():
    synthesizer = ReportSynthesizer(
        ScriptedAnalysisService(report=AnalysisServiceError("synthesize_report", "timed out after 120s"))
    )

    with pytest.raises(ReportGenerationError) as exc_info:
        await synthesizer.synthesize("quantum", empty_analysis())

    assert "timed out" in str(exc_info.value)


@pytest.mark.asyncio
async def test_save_creates_nested_directory_without_blocking(tmp_path, monkeypatch):
    created = []
    real_makedirs = aiofiles.os.makedirs

    async def recording_makedirs(path, exist_ok=False):
        created.append(str(path))
        await real_makedirs(path, exist_ok=exist_ok)

    monkeypatch.setattr(aiofiles.os, "makedirs", recording_makedirs)
    target = tmp_path / "out" / "nested" / "reports"
    synthesizer = ReportSynthesizer(ScriptedAnalysisService(), config=ReportConfig(reports_dir=str(target)))

    path = await synthesizer.save("report.md", "# Body")
    await synthesizer.save("again.md", "# Body")

    assert created == [str(target), str(target)]
    assert (target / "report.md").read_text(encoding="utf-8") == "# Body"
    assert path == str(target / "report.md")
