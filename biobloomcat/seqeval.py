"""Bloom-filter based evaluation of sequences against k-mer sets."""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Iterator
from typing import Protocol

from scipy.stats import binom

from .options import ScoringMethod

_END = math.inf
_VALID = frozenset("ACGT")
_COMPLEMENT = str.maketrans("ACGT", "TGCA")


def _canonical(kmer: str) -> str:
    kmer = kmer.upper()
    rc = kmer.translate(_COMPLEMENT)[::-1]
    return min(kmer, rc)


class KmerFilter(Protocol):
    kmer_size: int
    fpr: float

    def __contains__(self, kmer: str) -> bool: ...


class KmerSetFilter:
    """An exact k-mer membership set with a nominal false positive rate."""

    def __init__(self, kmer_size: int, kmers: Iterable[str], fpr: float = 0.0):
        if kmer_size <= 0:
            raise ValueError("k-mer size must be positive")
        self.kmer_size = kmer_size
        self.fpr = fpr
        stored = set()
        for kmer in kmers:
            if len(kmer) != kmer_size or not set(kmer.upper()) <= _VALID:
                raise ValueError(f"invalid k-mer for size {kmer_size}: {kmer!r}")
            stored.add(_canonical(kmer))
        self._kmers = frozenset(stored)

    def contains(self, kmer: str) -> bool:
        """Return True when the k-mer or its reverse complement is stored."""
        if len(kmer) != self.kmer_size:
            return False
        return _canonical(kmer) in self._kmers

    def __contains__(self, kmer: str) -> bool:
        return self.contains(kmer)

    def __len__(self) -> int:
        return len(self._kmers)


def iter_kmers(seq: str, kmer_size: int) -> Iterator[tuple[int, str]]:
    """Yield (position, k-mer) for every window made only of A, C, G and T."""
    upper = seq.upper()
    run = 0
    for end, base in enumerate(upper):
        run = run + 1 if base in _VALID else 0
        if run >= kmer_size:
            start = end - kmer_size + 1
            yield start, upper[start:end + 1]


def denormalize_score(score: float, kmer_size: int, seq_len: int) -> float:
    """Convert a 0..1 score into a count of k-mer frames."""
    if not 0 <= score <= 1:
        raise ValueError(f"score must lie between 0 and 1, got {score}")
    return score * (seq_len - kmer_size + 1)


def normalize_score(score: float, kmer_size: int, seq_len: int) -> float:
    """Convert a frame count into a score relative to the number of frames."""
    frames = seq_len - kmer_size + 1
    if frames <= 0:
        raise ValueError("sequence is shorter than the k-mer size")
    return score / frames


def calc_min_count(frame_len: int, bf_fpr: float, min_fpr: float) -> int:
    """Minimum number of matches needed so that chance matches stay below min_fpr."""
    q = binom.isf(min_fpr, frame_len, bf_fpr)
    if math.isnan(q):
        q = 0
    return max(int(q), 1)


def calc_prob_matches(frame_len: int, bf_fpr: float, matches: int) -> float:
    """Probability of seeing more than `matches` false positive hits."""
    return float(binom.sf(matches, frame_len, bf_fpr))


def _simple_increment(streak: int) -> float:
    return 0.5 if streak == 0 else 1.0


def _harmonic_increment(streak: int) -> float:
    return 0.5 if streak == 0 else 1.0 - 1.0 / (1.0 + streak)


def _unit_increment(streak: int) -> float:
    return 1.0


def _scored(kmer: str, subtract: KmerFilter | None) -> bool:
    return subtract is None or kmer not in subtract


def _eval_threshold(
    rec: str,
    bloom: KmerFilter,
    thres: float,
    anti_thres: float,
    increment: Callable[[int], float],
    streak_threshold: int,
    subtract: KmerFilter | None,
) -> bool:
    k = bloom.kmer_size
    frames = list(iter_kmers(rec, k))
    n = len(frames)

    def pos(i: int) -> float:
        return frames[i][0] if i < n else _END

    score = 0.0
    anti = 0
    streak = 0
    prev = 0
    i = 0
    if n:
        p, kmer = frames[0]
        if kmer in bloom:
            if _scored(kmer, subtract):
                score += increment(0)
            if thres <= score:
                return True
            streak += 1
        else:
            anti += 1
            if anti_thres <= anti:
                return False
        prev = p
        i = 1
    while i < n:
        p, kmer = frames[i]
        if p != prev + 1:
            anti += p - prev - 1
            if anti_thres <= anti:
                return False
            streak = 0
        if kmer in bloom:
            if _scored(kmer, subtract):
                score += increment(streak)
            if thres <= score:
                return True
            prev = p
            i += 1
            streak += 1
        else:
            if streak < streak_threshold:
                anti += 1
                if anti_thres <= anti:
                    return False
                prev = p
                i += 1
            else:
                skip_end = p + k
                while pos(i) < skip_end:
                    anti += 1
                    if anti_thres <= anti:
                        return False
                    prev = frames[i][0]
                    i += 1
            streak = 0
    return False


def _accumulate(
    rec: str,
    bloom: KmerFilter,
    increment: Callable[[int], float],
    streak_threshold: int,
    subtract: KmerFilter | None,
) -> float:
    k = bloom.kmer_size
    frames = list(iter_kmers(rec, k))
    n = len(frames)

    def pos(i: int) -> float:
        return frames[i][0] if i < n else _END

    score = 0.0
    streak = 0
    prev = 0
    i = 0
    while i < n:
        p, kmer = frames[i]
        if p != prev + 1:
            streak = 0
        if kmer in bloom:
            if _scored(kmer, subtract):
                score += increment(streak)
            prev = p
            i += 1
            streak += 1
        else:
            if streak < streak_threshold:
                prev = p
                i += 1
            else:
                skip_end = p + k
                while pos(i) < skip_end:
                    prev = frames[i][0]
                    i += 1
            streak = 0
    return score


def eval_simple(rec, bloom, threshold, streak_threshold=3, subtract=None) -> bool:
    """Match test with half credit for the first k-mer of a run."""
    k = bloom.kmer_size
    thres = denormalize_score(threshold, k, len(rec))
    anti = math.floor(denormalize_score(1.0 - threshold, k, len(rec)))
    return _eval_threshold(rec, bloom, thres, anti, _simple_increment,
                           streak_threshold, subtract)


def eval_harmonic(rec, bloom, threshold, streak_threshold=3, subtract=None) -> bool:
    """Match test that penalizes short runs of matching k-mers."""
    k = bloom.kmer_size
    thres = denormalize_score(threshold, k, len(rec))
    anti = math.floor(denormalize_score(1.0 - threshold, k, len(rec)))
    return _eval_threshold(rec, bloom, thres, anti, _harmonic_increment,
                           streak_threshold, subtract)


def eval_binomial(rec, bloom, threshold, streak_threshold=3, subtract=None) -> bool:
    """Match test requiring enough hits to beat the filter's false positive rate."""
    k = bloom.kmer_size
    if len(rec) < k:
        return False
    frame_len = len(rec) - k + 1
    thres = calc_min_count(frame_len, bloom.fpr, threshold)
    anti = frame_len - thres
    return _eval_threshold(rec, bloom, thres, anti, _unit_increment,
                           streak_threshold, subtract)


def eval_min_match_len(rec, bloom, min_match_len, subtract=None) -> bool:
    """Match test based on a minimum number of contiguous matching bases."""
    k = bloom.kmer_size
    length = len(rec)
    match_len = 0
    prev = 0
    for p, kmer in iter_kmers(rec, k):
        if length - p + match_len < min_match_len:
            return False
        if p != prev + 1:
            match_len = 0
        if kmer in bloom:
            if _scored(kmer, subtract):
                match_len = k if match_len == 0 else match_len + 1
        else:
            match_len = 0
        if match_len >= min_match_len:
            return True
        prev = p
    return False


def eval_simple_score(rec, bloom, streak_threshold=3, subtract=None) -> float:
    """Exhaustive simple score normalized by the number of frames."""
    k = bloom.kmer_size
    if len(rec) < k:
        return 0.0
    score = _accumulate(rec, bloom, _simple_increment, streak_threshold, subtract)
    return normalize_score(score, k, len(rec))


def eval_harmonic_score(rec, bloom, streak_threshold=3, subtract=None) -> float:
    """Exhaustive harmonic score normalized by the number of frames."""
    k = bloom.kmer_size
    if len(rec) < k:
        return 0.0
    score = _accumulate(rec, bloom, _harmonic_increment, streak_threshold, subtract)
    return normalize_score(score, k, len(rec))


def eval_min_match_len_score(rec, bloom, subtract=None) -> int:
    """Length in bases of the contiguous match that ends the read."""
    k = bloom.kmer_size
    match_len = 0
    prev = 0
    for p, kmer in iter_kmers(rec, k):
        if p != prev + 1:
            match_len = 0
        if kmer in bloom:
            if _scored(kmer, subtract):
                match_len = k if match_len == 0 else match_len + 1
        else:
            match_len = 0
        prev = p
    return match_len


def eval_binomial_score(rec, bloom, streak_threshold=3, subtract=None) -> float:
    """Probability that the observed hits arose from false positives alone."""
    k = bloom.kmer_size
    if len(rec) < k:
        return 1.0
    frame_len = len(rec) - k + 1
    score = int(_accumulate(rec, bloom, _unit_increment, streak_threshold, subtract))
    return calc_prob_matches(frame_len, bloom.fpr, score)


def _round_half_away(value: float) -> int:
    return math.floor(value + 0.5) if value >= 0 else math.ceil(value - 0.5)


def _phred(prob: float) -> float:
    if prob <= 0:
        return math.inf
    return -10.0 * math.log10(prob)


def eval_read(rec, bloom, threshold, method=ScoringMethod.SIMPLE,
              streak_threshold=3, subtract=None) -> bool:
    """Decide whether a read matches a filter with the chosen scoring method."""
    if method is ScoringMethod.LENGTH:
        return eval_min_match_len(rec, bloom, _round_half_away(threshold), subtract)
    if method is ScoringMethod.HARMONIC:
        return eval_harmonic(rec, bloom, threshold, streak_threshold, subtract)
    if method is ScoringMethod.BINOMIAL:
        return eval_binomial(rec, bloom, threshold, streak_threshold, subtract)
    return eval_simple(rec, bloom, threshold, streak_threshold, subtract)


def eval_score(rec, bloom, method=ScoringMethod.SIMPLE,
               streak_threshold=3, subtract=None) -> float:
    """Compute a read's score exhaustively with the chosen scoring method."""
    if method is ScoringMethod.LENGTH:
        return eval_min_match_len_score(rec, bloom, subtract)
    if method is ScoringMethod.HARMONIC:
        return eval_harmonic_score(rec, bloom, streak_threshold, subtract)
    if method is ScoringMethod.BINOMIAL:
        return _phred(eval_binomial_score(rec, bloom, streak_threshold, subtract))
    return eval_simple_score(rec, bloom, streak_threshold, subtract)