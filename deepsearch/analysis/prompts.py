"""Prompt builders for the model service tasks."""

from __future__ import annotations

import json
from abc import ABC
from typing import Any, List

REPORT_SYSTEM_PROMPT = "You are a research specialist who writes detailed, well-structured reports."


class PromptBuilder(ABC):
    """Base class for all prompt builders.

    Provides common utilities for formatting prompts.
    """

    def _format_section(self, title: str, content: str) -> str:
        """Format a section with title.

        Args:
            title: Section title
            content: Section content

        Returns:
            Formatted section
        """
        return f"**{title}:**\n{content}\n"

    def _format_sections(self, sections: List[str]) -> str:
        return "\n".join(s for s in sections if s)

    def _truncate(self, text: str, max_length: int = 8000, marker: str = "...") -> str:
        """Truncate text to max length, appending ``marker`` when cut."""
        if len(text) <= max_length:
            return text
        return text[:max_length] + marker


class SearchTermsPromptBuilder(PromptBuilder):
    """Build the expand-terms prompt."""

    def build(self, query: str) -> str:
        sections = [
            "Analyze the following query and generate search terms optimized for finding relevant information on the web.",
            self._format_section("Query", f'"{query}"'),
            self._format_section(
                "Instructions",
                "1. Generate between 5 and 10 related search terms\n"
                "2. Include synonyms and variations of the original query\n"
                "3. Consider both technical and popular terms\n"
                "4. Format the answer as JSON",
            ),
            self._format_section(
                "Answer only with JSON in this format",
                "{\n"
                '  "original_query": "original query",\n'
                '  "search_terms": ["term1", "term2", "term3"],\n'
                '  "categories": ["category1", "category2"]\n'
                "}",
            ),
        ]
        return self._format_sections(sections)


class SourceAnalysisPromptBuilder(PromptBuilder):
    """Build the analyze-content prompt."""

    def __init__(self, max_content_chars: int = 8000):
        self.max_content_chars = max_content_chars

    def build(self, query: str, content: str) -> str:
        """Build prompt for scoring and summarizing one source.

        Args:
            query: Research query
            content: Source content, truncated to ``max_content_chars``

        Returns:
            Complete analysis prompt
        """
        excerpt = self._truncate(content, self.max_content_chars, marker=" ...[truncated]")
        sections = [
            f'Analyze the following web content in the context of the query "{query}".',
            self._format_section("Content", excerpt),
            self._format_section(
                "Instructions",
                "1. Extract information relevant to the query\n"
                "2. Identify key points and insights\n"
                "3. Assess the credibility of the source\n"
                "4. Write a structured summary",
            ),
            self._format_section(
                "Answer only with JSON in this format",
                "{\n"
                '  "relevance_score": 0-100,\n'
                '  "key_points": ["point1", "point2"],\n'
                '  "summary": "summary of the content",\n'
                '  "insights": ["insight1", "insight2"],\n'
                '  "credibility_score": 0-100,\n'
                '  "topics": ["topic1", "topic2"]\n'
                "}",
            ),
        ]
        return self._format_sections(sections)


class ReportPromptBuilder(PromptBuilder):
    """Build the synthesize-report prompt."""

    system_prompt = REPORT_SYSTEM_PROMPT

    def build(self, query: str, analysis_data: dict[str, Any]) -> str:
        sections = [
            f'Write a detailed report based on the research about: "{query}"',
            self._format_section("Analysis data", json.dumps(analysis_data, indent=2, ensure_ascii=False, default=str)),
            self._format_section(
                "Instructions",
                "1. Write a structured report in Markdown\n"
                "2. Include the sections Introduction, Main Findings, Insights and Conclusions\n"
                "3. Use appropriate Markdown formatting\n"
                "4. Cite sources when relevant\n"
                "5. Keep a professional but accessible tone",
            ),
            "Answer only with the Markdown content of the report.",
        ]
        return self._format_sections(sections)
