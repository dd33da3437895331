"""Decoding of free-text model responses into structured results.

Every decoder either returns a fully validated object or raises
``AnalysisParseError``; callers pick the named fallback for the task.
"""

from __future__ import annotations

import json
import re
from typing import Any, Optional

from pydantic import ValidationError

from deepsearch.analysis.schemas import SourceAnalysis
from deepsearch.errors import AnalysisParseError
from deepsearch.search.models import SearchTermsExpansion

MAX_SEARCH_TERMS = 10

_quoted = re.compile(r"[\"']([^\"']+)[\"']")


def extract_json_block(text: str) -> Optional[str]:
    """
    Return the first balanced ``{...}`` block in ``text``.

    Braces inside JSON string literals are ignored. Returns None when no
    balanced block exists.
    """
    if not text:
        return None

    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start : index + 1]
        start = text.find("{", start + 1)
    return None


def _load_object(task: str, text: str) -> dict[str, Any]:
    block = extract_json_block(text)
    if block is None:
        raise AnalysisParseError(task, "no JSON object in response")
    try:
        data = json.loads(block)
    except json.JSONDecodeError as e:
        raise AnalysisParseError(task, f"invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise AnalysisParseError(task, "response JSON is not an object")
    return data


def _unique(items: list[str], limit: int) -> list[str]:
    result: list[str] = []
    for item in items:
        if item and item not in result:
            result.append(item)
        if len(result) >= limit:
            break
    return result


def decode_search_terms(query: str, text: str) -> SearchTermsExpansion:
    """Decode an expand-terms response."""
    data = _load_object("expand_terms", text)

    raw_terms = data.get("search_terms")
    if not isinstance(raw_terms, list):
        raise AnalysisParseError("expand_terms", "search_terms is not a list")

    terms = _unique([str(term).strip() for term in raw_terms if isinstance(term, (str, int, float))], MAX_SEARCH_TERMS)
    if not terms:
        raise AnalysisParseError("expand_terms", "no usable search terms")

    raw_categories = data.get("categories") or []
    categories = [str(c).strip() for c in raw_categories if str(c).strip()] if isinstance(raw_categories, list) else []

    return SearchTermsExpansion(original_query=query, search_terms=terms, categories=categories)


def fallback_search_terms(query: str, text: str) -> SearchTermsExpansion:
    """
    Recover terms from a response that carried no usable JSON.

    The query comes first, followed by quoted phrases of 3 to 49 characters.
    """
    candidates = [query]
    for match in _quoted.finditer(text or ""):
        term = match.group(1).strip()
        if 2 < len(term) < 50:
            candidates.append(term)
    return SearchTermsExpansion(
        original_query=query,
        search_terms=_unique(candidates, MAX_SEARCH_TERMS),
        categories=["general"],
    )


def decode_source_analysis(text: str) -> SourceAnalysis:
    """Decode an analyze-content response."""
    data = _load_object("analyze_content", text)
    try:
        return SourceAnalysis.model_validate(data)
    except ValidationError as e:
        raise AnalysisParseError("analyze_content", f"schema mismatch: {e.error_count()} errors") from e


def fallback_source_analysis(content: str) -> SourceAnalysis:
    """Neutral analysis built from the content itself."""
    return SourceAnalysis(
        relevance_score=50,
        credibility_score=50,
        summary=content[:500] + "...",
        key_points=["Content available for analysis"],
        insights=[],
        topics=["general"],
    )
