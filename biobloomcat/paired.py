"""Categorization of paired-end reads against a set of k-mer filters."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from contextlib import ExitStack
from dataclasses import replace
from itertools import chain
from pathlib import Path
from typing import IO

from .classifier import BioBloomClassifier, _output_type_text
from .options import OutputType
from .results import ResultsManager
from .seqio import Record, strip_mate_suffix

_Outputs = tuple[list[IO[str]], list[IO[str]]]


class PairedClassifier(BioBloomClassifier):
    """Classifies read pairs, keeping both mates in the same category."""

    # -- pair sources ------------------------------------------------------

    def _pairs_from_files(self, file1: str | Path,
                          file2: str | Path) -> Iterator[tuple[Record, Record]]:
        """Read two files in lockstep, stopping when either runs out."""
        yield from zip(self._records(file1), self._records(file2))

    def _smart_pairs(self, path: str | Path) -> Iterator[tuple[Record, Record]]:
        """Match mates from one file by their names with the mate suffix removed."""
        unpaired: dict[str, Record] = {}
        for rec in self._records(path):
            rec = replace(rec, header=strip_mate_suffix(rec.header))
            mate = unpaired.pop(rec.header, None)
            if mate is None:
                unpaired[rec.header] = rec
            else:
                yield mate, rec

    # -- per-pair work -----------------------------------------------------

    def _print_pair(self, rec1: Record, rec2: Record, score1: float,
                    score2: float, index: int) -> None:
        text = (self._stdout_text(rec1, score1, index)
                + self._stdout_text(rec2, score2, index))
        if text:
            self._out.write(text)

    def _process_pair(self, rec1: Record, rec2: Record,
                      results: ResultsManager, outputs: _Outputs | None,
                      output_type: str) -> None:
        eval1, eval2 = self._evaluator.evaluate_read_pair(
            rec1.seq, rec2.seq, self.inclusive)
        index = results.update_pair(eval1.hits, eval2.hits)
        self._print_pair(rec1, rec2, eval1.score, eval2.score, index)
        if outputs is not None:
            outputs1, outputs2 = outputs
            outputs1[index].write(self._format_for_file(
                index, rec1, output_type, eval1, results))
            outputs2[index].write(self._format_for_file(
                index, rec2, output_type, eval2, results))

    def _run_pairs(self, pairs: Iterable[tuple[Record, Record]],
                   results: ResultsManager, outputs: _Outputs | None = None,
                   output_type: str = "") -> int:
        total = 0
        for rec1, rec2 in pairs:
            total += 1
            self._progress(total)
            self._process_pair(rec1, rec2, results, outputs, output_type)
        return total

    def _finish(self, results: ResultsManager, total: int) -> int:
        self._log(f"Total Reads:{total}")
        self._write_summary(results, total)
        return total

    def _classify(self, pairs: Iterable[tuple[Record, Record]]) -> int:
        results = self._new_results()
        self._log("Filtering Start")
        total = self._run_pairs(pairs, results)
        return self._finish(results, total)

    def _classify_print(self, pairs: Iterable[tuple[Record, Record]],
                        output_type: OutputType | str) -> int:
        kind = _output_type_text(output_type)
        results = self._new_results()
        paths1 = self._output_paths(kind, "_1")
        paths2 = self._output_paths(kind, "_2")
        with ExitStack() as stack:
            outputs1 = [stack.enter_context(self._open_output(p)) for p in paths1]
            outputs2 = [stack.enter_context(self._open_output(p)) for p in paths2]
            self._log("Filtering Start")
            total = self._run_pairs(pairs, results, (outputs1, outputs2), kind)
        for path1, path2 in zip(paths1, paths2):
            self._log(f"File written to: {path1}")
            self._log(f"File written to: {path2}")
        return self._finish(results, total)

    # -- public entry points -----------------------------------------------

    def filter_pair(self, file1: str | Path, file2: str | Path) -> int:
        """Classify pairs from two mate files; write the summary only."""
        return self._classify(self._pairs_from_files(file1, file2))

    def filter_pair_print(self, file1: str | Path, file2: str | Path,
                          output_type: OutputType | str) -> int:
        """Classify pairs from two mate files, writing each mate by category."""
        return self._classify_print(self._pairs_from_files(file1, file2),
                                    output_type)

    def filter_smart_pair(self, path: str | Path) -> int:
        """Classify pairs found in one interleaved or mixed file."""
        return self._classify(self._smart_pairs(path))

    def filter_smart_pair_print(self, path: str | Path,
                                output_type: OutputType | str) -> int:
        """Classify pairs found in one file, writing each mate by category."""
        return self._classify_print(self._smart_pairs(path), output_type)

    def filter_pair_lists(self, files1: Sequence[str | Path],
                          files2: Sequence[str | Path]) -> int:
        """Classify pairs from matching lists of first- and second-mate files."""
        files1 = list(files1)
        files2 = list(files2)
        if len(files1) != len(files2):
            raise ValueError(
                f"{len(files1)} first-mate files given with "
                f"{len(files2)} second-mate files"
            )
        pairs = chain.from_iterable(
            self._pairs_from_files(f1, f2) for f1, f2 in zip(files1, files2))
        return self._classify(pairs)