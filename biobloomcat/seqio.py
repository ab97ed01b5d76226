"""Reading FASTA/FASTQ records and formatting categorized reads."""

from __future__ import annotations

import gzip
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import IO

_GZIP_MAGIC = b"\x1f\x8b"
_FIRST_SPACE = re.compile(r"\s")


@dataclass
class Record:
    """One sequencing read."""

    header: str
    seq: str
    qual: str = ""
    comment: str = ""


def _open_text(path: str | Path) -> IO[str]:
    with open(path, "rb") as probe:
        magic = probe.read(2)
    if magic == _GZIP_MAGIC:
        return gzip.open(path, "rt", encoding="latin-1")
    return open(path, "r", encoding="latin-1")


def _split_header(text: str) -> tuple[str, str]:
    match = _FIRST_SPACE.search(text)
    if match is None:
        return text, ""
    return text[:match.start()], text[match.end():]


def _is_header(line: str) -> bool:
    return line[:1] in (">", "@")


def _next_header(lines: Iterator[str]) -> str | None:
    for line in lines:
        if _is_header(line):
            return line
    return None


def _parse(handle: Iterable[str]) -> Iterator[Record]:
    lines = (line.rstrip("\r\n") for line in handle)
    header = _next_header(lines)
    while header is not None:
        name, comment = _split_header(header[1:])
        header = None
        seq_parts: list[str] = []
        is_fastq = False
        for line in lines:
            if _is_header(line):
                header = line
                break
            if line[:1] == "+":
                is_fastq = True
                break
            seq_parts.append(line)
        seq = "".join(seq_parts)
        if not is_fastq:
            yield Record(name, seq, "", comment)
            continue
        qual_parts: list[str] = []
        qual_len = 0
        if seq:
            for line in lines:
                qual_parts.append(line)
                qual_len += len(line)
                if qual_len >= len(seq):
                    break
        qual = "".join(qual_parts)
        if len(qual) != len(seq):
            raise ValueError(
                f"quality length does not match sequence length for read {name!r}"
            )
        yield Record(name, seq, qual, comment)
        header = _next_header(lines)


def read_records(path: str | Path) -> Iterator[Record]:
    """Yield records from a FASTA or FASTQ file, gzip-compressed or plain."""
    with _open_text(path) as handle:
        yield from _parse(handle)


def strip_mate_suffix(name: str) -> str:
    """Drop a two-character mate suffix such as '/1' or '/2' from a read name."""
    if name and name[-1] in ("1", "2"):
        return name[:-2]
    return name


def _extra_text(extra: object) -> str:
    if extra is None:
        return ""
    if isinstance(extra, (int, float)) and not isinstance(extra, bool):
        text = "%g" % extra
    else:
        text = str(extra)
    return " " + text if text else ""


def format_fastq(rec: Record, extra: object = None) -> str:
    """Render a record as FASTQ, optionally appending text to the header line."""
    return (
        f"@{rec.header} {rec.comment}{_extra_text(extra)}\n"
        f"{rec.seq}\n+\n{rec.qual}\n"
    )


def format_fasta(rec: Record, extra: object = None) -> str:
    """Render a record as FASTA, optionally appending text to the header line."""
    return f">{rec.header} {rec.comment}{_extra_text(extra)}\n{rec.seq}\n"


def format_scores(scores: Iterable[float]) -> str:
    """Join per-filter scores with single spaces."""
    return " ".join("%g" % score for score in scores)