"""One-shot deep search runner.

Usage: python -m deepsearch "your research question"
"""

import argparse
import asyncio
import sys

import structlog

from deepsearch.config.logging_config import configure_logging
from deepsearch.config.settings import get_settings
from deepsearch.errors import DeepSearchError
from deepsearch.pipeline.dependencies import build_dependencies
from deepsearch.pipeline.models import DeepSearchOptions

logger = structlog.get_logger(__name__)


async def run_deep_search(args: argparse.Namespace) -> int:
    """Run one deep search and print the report."""
    settings = get_settings()
    if args.save:
        settings = settings.model_copy(update={"reports_auto_save": True})

    deps = await build_dependencies(settings, use_database=not args.no_database)
    try:
        result = await deps.orchestrator.perform_deep_search(
            args.query,
            DeepSearchOptions(
                use_advanced_search=not args.basic,
                generate_embeddings=not args.no_embeddings,
                max_sources=args.max_sources,
                save_to_database=not args.no_database,
            ),
        )
    except DeepSearchError as e:
        print(f"\n[!] Deep search failed: {e}", file=sys.stderr)
        return 1
    finally:
        await deps.aclose()

    report = result.report
    print(f"\n{'=' * 50}")
    print(report.title)
    print(f"{'=' * 50}")
    print(f"Search terms: {', '.join(result.search_terms)}")
    print(f"Sources: {report.successful_analyses}/{report.source_count} analyzed")
    if result.session_id:
        print(f"Session: {result.session_id}")
    if report.file_path:
        print(f"Saved to: {report.file_path}")
    print()
    print(report.content)
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(prog="deepsearch", description="Run one automated deep research query")
    parser.add_argument("query", help="Research query")
    parser.add_argument("--max-sources", "-n", type=int, default=None, help="Result budget (default: from config)")
    parser.add_argument("--basic", action="store_true", help="Skip dork variants on the first search term")
    parser.add_argument("--no-embeddings", action="store_true", help="Do not embed analyzed sources")
    parser.add_argument("--no-database", action="store_true", help="Run without the PostgreSQL session store")
    parser.add_argument("--save", action="store_true", help="Write the report to the reports directory")

    args = parser.parse_args()

    settings = get_settings()
    configure_logging(debug_mode=settings.debug, log_level=settings.log_level)

    sys.exit(asyncio.run(run_deep_search(args)))


if __name__ == "__main__":
    main()
