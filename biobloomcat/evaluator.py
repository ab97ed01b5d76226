"""Evaluation of reads against a list of filters under the configured mode."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from .options import FilteringMode, Options
from .seqeval import KmerFilter, eval_read, eval_score


@dataclass
class ReadEvaluation:
    """Outcome of evaluating one read.

    ``hits`` holds the indices of matching filters in ascending order,
    ``score`` the best-hit score (best-hit mode only) and ``scores`` the
    per-hit scores (best-hit mode) or per-filter scores (scores mode).
    """

    hits: list[int] = field(default_factory=list)
    score: float = 0.0
    scores: list[float] = field(default_factory=list)


class ReadEvaluator:
    """Decides which filters a read, or a read pair, matches."""

    def __init__(self, filters: Sequence[KmerFilter], score_threshold: float,
                 options: Options | None = None):
        self.filters = list(filters)
        self.score_threshold = score_threshold
        self.options = options if options is not None else Options()

    def _matches(self, seq: str, bloom: KmerFilter) -> bool:
        return eval_read(seq, bloom, self.score_threshold,
                         self.options.scoring_method,
                         self.options.streak_threshold)

    def _score(self, seq: str, bloom: KmerFilter) -> float:
        return eval_score(seq, bloom, self.options.scoring_method,
                          self.options.streak_threshold)

    def evaluate_read(self, seq: str) -> ReadEvaluation:
        """Evaluate a single read according to the filtering mode."""
        mode = self.options.mode
        if mode is FilteringMode.ORDERED:
            return self.evaluate_ordered(seq)
        if mode is FilteringMode.BESTHIT:
            return self.evaluate_best_hit(seq)
        if mode is FilteringMode.SCORES:
            return self.evaluate_scores(seq)
        return self.evaluate_std(seq)

    def evaluate_read_pair(self, seq1: str, seq2: str,
                           inclusive: bool = False
                           ) -> tuple[ReadEvaluation, ReadEvaluation]:
        """Evaluate both mates; ordered mode considers the pair jointly."""
        if self.options.mode is FilteringMode.ORDERED:
            return self.evaluate_ordered_pair(seq1, seq2, inclusive)
        return self.evaluate_read(seq1), self.evaluate_read(seq2)

    def evaluate_ordered(self, seq: str) -> ReadEvaluation:
        """Assign the read to the first filter, in priority order, it matches."""
        for index, bloom in enumerate(self.filters):
            if self._matches(seq, bloom):
                return ReadEvaluation(hits=[index])
        return ReadEvaluation()

    def evaluate_ordered_pair(self, seq1: str, seq2: str,
                              inclusive: bool = False
                              ) -> tuple[ReadEvaluation, ReadEvaluation]:
        """Assign the pair to the first filter that one mate (inclusive) or
        both mates match."""
        combine = any if inclusive else all
        for index, bloom in enumerate(self.filters):
            if combine(self._matches(seq, bloom) for seq in (seq1, seq2)):
                return ReadEvaluation(hits=[index]), ReadEvaluation(hits=[index])
        return ReadEvaluation(), ReadEvaluation()

    def evaluate_std(self, seq: str) -> ReadEvaluation:
        """Report every filter the read matches."""
        hits = [index for index, bloom in enumerate(self.filters)
                if self._matches(seq, bloom)]
        return ReadEvaluation(hits=hits)

    def evaluate_best_hit(self, seq: str) -> ReadEvaluation:
        """Assign the read to the filters sharing the highest positive score."""
        best: list[int] = []
        max_score = 0.0
        for index, bloom in enumerate(self.filters):
            score = self._score(seq, bloom)
            if max_score < score:
                max_score = score
                best = [index]
            elif max_score == score:
                best.append(index)
        if max_score > 0:
            return ReadEvaluation(hits=best, score=max_score,
                                  scores=[max_score] * len(best))
        return ReadEvaluation(score=max_score)

    def evaluate_scores(self, seq: str) -> ReadEvaluation:
        """Report matching filters together with every filter's score."""
        hits = [index for index, bloom in enumerate(self.filters)
                if self._matches(seq, bloom)]
        scores = [self._score(seq, bloom) for bloom in self.filters]
        return ReadEvaluation(hits=hits, scores=scores)