"""Run-time settings shared by the categorizer components."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class OutputType(Enum):
    """Format used when writing categorized reads."""

    NONE = "none"
    FASTQ = "fq"
    FASTA = "fa"
    TSV = "tsv"


class FilteringMode(Enum):
    """How hits against several filters are resolved."""

    STD = "std"
    ORDERED = "ordered"
    BESTHIT = "besthit"
    SCORES = "scores"


class ScoringMethod(Enum):
    """Algorithm used to decide whether a read matches a filter."""

    SIMPLE = "simple"
    HARMONIC = "harmonic"
    BINOMIAL = "binomial"
    LENGTH = "length"


@dataclass
class Options:
    """Settings that stay mostly constant for the duration of a run."""

    inclusive: bool = False
    score: float = 0.15
    output_prefix: str = ""
    file_postfix: str = ""
    output_type: OutputType = OutputType.NONE
    mode: FilteringMode = FilteringMode.STD
    scoring_method: ScoringMethod = ScoringMethod.SIMPLE
    min_hit_only: bool = False
    max_group_size: int = 2**32 - 1
    debug: int = 0
    multi_thresh: float = 1.0
    inverse: bool = False
    filters_file: str = ""
    paired: bool = False
    stdout: bool = False
    best_hit_count_agree: bool = False
    min_count_non_sat_count: int = 0
    frame_matches: int = 1
    hit_only: bool = False
    streak_threshold: int = 3
    threads: int = 1
    file_interval: int = 10_000_000
    verbose: int = 0
    dust: bool = False
    dust_t: int = 20
    dust_window: int = 64