"""Automated deep research: query expansion, web retrieval, model analysis and reporting."""

__version__ = "1.0.0"
