"""Text and date helpers."""
