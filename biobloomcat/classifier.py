"""Categorization of single-end reads against a set of k-mer filters."""

from __future__ import annotations

import gzip
import sys
from collections.abc import Iterable, Iterator, Sequence
from contextlib import ExitStack
from pathlib import Path
from typing import IO

from .evaluator import ReadEvaluation, ReadEvaluator
from .options import FilteringMode, Options, OutputType, ScoringMethod
from .results import MULTI_MATCH, NO_MATCH, ResultsManager
from .seqeval import KmerFilter
from .seqio import Record, format_fasta, format_fastq, format_scores, read_records


def _output_type_text(output_type: OutputType | str) -> str:
    if isinstance(output_type, OutputType):
        if output_type is OutputType.NONE:
            raise ValueError("an output type of fa or fq is required")
        return output_type.value
    return str(output_type)


class BioBloomClassifier:
    """Assigns reads to the filters they match and reports a summary."""

    def __init__(self, filters: Sequence[KmerFilter], filter_ids: Sequence[str],
                 options: Options | None = None,
                 stdout: IO[str] | None = None, err: IO[str] | None = None):
        filters = list(filters)
        filter_ids = list(filter_ids)
        if len(filters) != len(filter_ids):
            raise ValueError(
                f"{len(filters)} filters given with {len(filter_ids)} filter ids"
            )
        self.options = options if options is not None else Options()
        self._filters = filters
        self._filter_ids = filter_ids
        self._out = stdout if stdout is not None else sys.stdout
        self._err = err if err is not None else sys.stderr
        self._stdout_enabled = False
        self._inclusive = False
        self._evaluator = ReadEvaluator(filters, self.options.score, self.options)
        for filter_id, bloom in zip(filter_ids, filters):
            message = f"Loaded Filter: {filter_id}"
            if self.options.scoring_method is ScoringMethod.BINOMIAL:
                message += f" FPR: {bloom.fpr:g}"
            self._log(message)

    @property
    def filter_ids(self) -> list[str]:
        return list(self._filter_ids)

    @property
    def inclusive(self) -> bool:
        return self._inclusive

    @property
    def stdout_enabled(self) -> bool:
        return self._stdout_enabled

    def set_ordered_filter(self) -> None:
        """Give earlier filters priority; not available together with best-hit mode."""
        if self.options.mode is FilteringMode.BESTHIT:
            raise ValueError(
                "Best Hit mode and Ordered mode detected. Not yet supported."
            )
        self.options.mode = FilteringMode.ORDERED

    def set_inclusive(self) -> None:
        """Let a hit on one mate count for the whole pair."""
        self._inclusive = True

    def set_stdout(self) -> None:
        """Echo reads matching the first filter (or, inverted, the rest) to stdout."""
        self._stdout_enabled = True

    # -- helpers shared with the paired-end classifier -------------------

    def _log(self, message: str) -> None:
        print(message, file=self._err)

    def _new_results(self) -> ResultsManager:
        return ResultsManager(self._filter_ids, self._inclusive)

    def _records(self, path: str | Path) -> Iterator[Record]:
        try:
            with open(path, "rb"):
                pass
        except OSError as exc:
            raise OSError(f"file {path} cannot be opened") from exc
        yield from read_records(path)

    def _progress(self, total: int) -> None:
        if total % self.options.file_interval == 0:
            self._log(f"Currently Reading Read Number: {total}")

    def _output_paths(self, output_type: str, mate: str = "") -> list[str]:
        prefix = self.options.output_prefix
        postfix = self.options.file_postfix
        names = [*self._filter_ids, NO_MATCH, MULTI_MATCH]
        return [f"{prefix}_{name}{mate}.{output_type}{postfix}" for name in names]

    @staticmethod
    def _open_output(path: str) -> IO[str]:
        if path.endswith(".gz"):
            return gzip.open(path, "wt", encoding="latin-1")
        return open(path, "w", encoding="latin-1")

    def _write_summary(self, results: ResultsManager, total: int) -> None:
        path = self.options.output_prefix + "_summary.tsv"
        self._log(f"Writing file: {path}")
        with self._open_output(path) as handle:
            handle.write(results.summary(total))
        self._out.flush()

    def _stdout_text(self, rec: Record, score: float, index: int) -> str:
        if not self._stdout_enabled:
            return ""
        if self.options.inverse:
            return format_fastq(rec) if index != 0 else ""
        if index != 0:
            return ""
        if self.options.mode is FilteringMode.BESTHIT:
            return format_fastq(rec, score)
        return format_fastq(rec)

    def _print_single(self, rec: Record, score: float, index: int) -> None:
        text = self._stdout_text(rec, score, index)
        if text:
            self._out.write(text)

    def _format_for_file(self, index: int, rec: Record, output_type: str,
                         evaluation: ReadEvaluation,
                         results: ResultsManager) -> str:
        mode = self.options.mode
        is_multi = index == results.multi_match_index
        if output_type == "fa":
            if mode is FilteringMode.SCORES and is_multi:
                return format_fasta(rec, format_scores(evaluation.scores))
            if mode is FilteringMode.BESTHIT:
                if is_multi:
                    return format_fasta(rec, format_scores(evaluation.scores))
                return format_fasta(rec, evaluation.score)
            return format_fasta(rec)
        if mode is FilteringMode.SCORES and is_multi:
            return format_fastq(rec, format_scores(evaluation.scores))
        if mode is FilteringMode.BESTHIT:
            return format_fastq(rec, evaluation.score)
        return format_fastq(rec)

    # -- single-end filtering --------------------------------------------

    def _run(self, input_files: Iterable[str | Path],
             outputs: list[IO[str]] | None, output_type: str,
             results: ResultsManager) -> int:
        total = 0
        for path in input_files:
            for rec in self._records(path):
                total += 1
                self._progress(total)
                evaluation = self._evaluator.evaluate_read(rec.seq)
                index = results.update(evaluation.hits)
                self._print_single(rec, evaluation.score, index)
                if outputs is not None:
                    outputs[index].write(self._format_for_file(
                        index, rec, output_type, evaluation, results))
        return total

    def filter(self, input_files: Iterable[str | Path]) -> int:
        """Classify reads and write only the summary; return the read count."""
        results = self._new_results()
        self._log("Filtering Start")
        total = self._run(input_files, None, "", results)
        self._log(f"Total Reads: {total}")
        self._write_summary(results, total)
        return total

    def filter_print(self, input_files: Iterable[str | Path],
                     output_type: OutputType | str) -> int:
        """Classify reads, writing each to the file of its category."""
        kind = _output_type_text(output_type)
        results = self._new_results()
        paths = self._output_paths(kind)
        with ExitStack() as stack:
            outputs = [stack.enter_context(self._open_output(p)) for p in paths]
            self._log("Filtering Start")
            total = self._run(input_files, outputs, kind, results)
        for path in paths:
            self._log(f"File written to: {path}")
        self._log(f"Total Reads:{total}")
        self._write_summary(results, total)
        return total