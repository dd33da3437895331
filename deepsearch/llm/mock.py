"""Mock chat model for offline runs."""

from __future__ import annotations

import json
import re
from typing import Any, List, Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage
from langchain_core.outputs import ChatGeneration, ChatResult


class MockChatModel(BaseChatModel):
    """Chat model that answers each task prompt with deterministic output."""

    model_name: str = "mock"

    @property
    def _llm_type(self) -> str:
        return "mock-chat"

    def _generate(
        self,
        messages: List[BaseMessage],
        stop: Optional[List[str]] = None,
        run_manager: Any = None,
        **kwargs: Any,
    ) -> ChatResult:
        content = self._compose_response(messages)
        return ChatResult(generations=[ChatGeneration(message=AIMessage(content=content))])

    async def _agenerate(
        self,
        messages: List[BaseMessage],
        stop: Optional[List[str]] = None,
        run_manager: Any = None,
        **kwargs: Any,
    ) -> ChatResult:
        return self._generate(messages, stop=stop, run_manager=run_manager, **kwargs)

    def _compose_response(self, messages: List[BaseMessage]) -> str:
        if not messages:
            return "Mock response."

        last_text = str(messages[-1].content)
        lower = last_text.lower()

        if "generate search terms" in lower:
            query = self._extract_quoted(last_text, r"\*\*Query:\*\*\s*\"(.+?)\"")
            return json.dumps(
                {
                    "original_query": query,
                    "search_terms": [query, f"{query} overview", f"{query} latest research"],
                    "categories": ["general"],
                }
            )

        if "analyze the following web content" in lower:
            match = re.search(r"\*\*Content:\*\*\s*(.+?)\n\*\*Instructions", last_text, re.DOTALL)
            excerpt = (match.group(1).strip() if match else "")[:200]
            return json.dumps(
                {
                    "relevance_score": 75,
                    "credibility_score": 60,
                    "summary": f"Mock summary: {excerpt}",
                    "key_points": ["The source discusses the query topic"],
                    "insights": ["Multiple sources cover this topic"],
                    "topics": ["general"],
                }
            )

        if "write a detailed report" in lower:
            query = self._extract_quoted(last_text, r"research about:\s*\"(.+?)\"")
            return (
                f"# {query}\n\n"
                "## Introduction\nThis mock report summarizes the analyzed sources.\n\n"
                "## Main Findings\n- The topic is covered by several sources.\n\n"
                "## Insights\n- Sources broadly agree.\n\n"
                "## Conclusions\nMock conclusion."
            )

        return "Mock response based on provided context."

    @staticmethod
    def _extract_quoted(text: str, pattern: str) -> str:
        match = re.search(pattern, text)
        return match.group(1).strip() if match else "the topic"
