"""Exception hierarchy for the deep search pipeline."""


class DeepSearchError(Exception):
    """Base class for all pipeline errors."""


class InvalidQueryError(DeepSearchError):
    """Raised when a query is missing or empty."""


class AnalysisServiceError(DeepSearchError):
    """Raised when a call to the model service fails."""

    def __init__(self, task: str, message: str):
        self.task = task
        super().__init__(f"{task} failed: {message}")


class AnalysisParseError(AnalysisServiceError):
    """Raised when a model response cannot be decoded into the task schema."""


class WebSearchError(DeepSearchError):
    """Raised when the web search phase fails as a whole."""


class ReportGenerationError(DeepSearchError):
    """Raised when the final report cannot be produced."""


class StoreNotConfiguredError(DeepSearchError):
    """Raised when an operation needs the session store but none is configured."""
