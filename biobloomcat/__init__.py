"""Categorize sequencing reads against in-memory k-mer filters."""

__version__ = "2.3.4"

__all__ = [
    "classifier",
    "cli",
    "evaluator",
    "options",
    "paired",
    "results",
    "seqeval",
    "seqio",
]