"""Command-line argument handling for the read categorizer."""

from __future__ import annotations

import getopt
import os
import re
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field

from .options import FilteringMode, Options, OutputType, ScoringMethod

HELP_HINT = "Try '--help' for more information."

_SHORT_OPTIONS = "f:p:hegl:vs:r:t:cdiwI:nm:S:bDT:W:"

_LONG_TO_SHORT = {
    "prefix": "p",
    "filter_files": "f",
    "paired_mode": "e",
    "inclusive": "i",
    "score": "s",
    "help": "h",
    "interval": "I",
    "threads": "t",
    "gz_output": "g",
    "file_list": "l",
    "version": "v",
    "multi": "m",
    "streak": "r",
    "min_hit_only": "o",
    "ordered": "c",
    "stdout_filter": "d",
    "inverse": "n",
    "best_hit": "b",
    "with_score": "w",
    "score_type": "S",
    "dust": "D",
    "T_dust": "T",
    "window_dust": "W",
}

_REQUIRES_ARGUMENT = frozenset("fpslItrmSTW")
_FLAG_ONLY = ("fq", "fa", "verbose")

_LONG_OPTIONS = [
    name + ("=" if short in _REQUIRES_ARGUMENT else "")
    for name, short in _LONG_TO_SHORT.items()
] + list(_FLAG_ONLY)

_INT = re.compile(r"\s*[+-]?\d+")
_FLOAT = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


class UsageError(Exception):
    """Raised when the command line is invalid."""


@dataclass
class CategorizerArgs:
    """Everything the command line asks the categorizer to do."""

    options: Options = field(default_factory=Options)
    filter_files: list[str] = field(default_factory=list)
    input_files: list[str] = field(default_factory=list)
    file_list: str = ""
    paired: bool = False
    smart_pair: bool = False
    ordered: bool = False
    stdout: bool = False
    output_type: str = ""
    binomial_score: float = 100.0
    show_help: bool = False
    show_version: bool = False


def convert_input_string(text: str) -> list[str]:
    """Split a whitespace-separated string into its parts."""
    return text.split()


def folder_check(path: str) -> None:
    """Make sure the output folder exists and is a directory."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Error: Output folder does not exist. {path}")
    if not os.path.isdir(path):
        raise NotADirectoryError(
            f"Error: Output folder - file exists with this name. {path}"
        )


def file_exists(path: str) -> bool:
    """Return True when the file can be opened for reading."""
    try:
        with open(path, "rb"):
            return True
    except OSError:
        return False


def read_file_list(path: str) -> tuple[list[str], list[str]]:
    """Read a file of lines holding one or two file names each."""
    first: list[str] = []
    second: list[str] = []
    with open(path, "r", encoding="utf-8") as handle:
        for line in handle:
            tokens = line.split()
            first.append(tokens[0] if tokens else "")
            second.append(tokens[1] if len(tokens) > 1 else "")
    return first, second


def _leading_int(text: str) -> int | None:
    match = _INT.match(text)
    return int(match.group(0)) if match else None


def _leading_float(text: str) -> float | None:
    match = _FLOAT.match(text)
    return float(match.group(0)) if match else None


def _require_int(value: str, letter: str, label: str = "parameter") -> int:
    parsed = _leading_int(value)
    if parsed is None:
        raise UsageError(f"Error - Invalid {label}! {letter}: {value}")
    return parsed


def parse_args(argv: Sequence[str] | None = None) -> CategorizerArgs:
    """Parse the command line into a CategorizerArgs, raising UsageError on errors."""
    if argv is None:
        argv = sys.argv[1:]
    args = CategorizerArgs()
    opt = args.options
    errors: list[str] = []
    die = False
    fastq = fasta = False
    filters_text = ""

    try:
        parsed, rest = getopt.gnu_getopt(list(argv), _SHORT_OPTIONS, _LONG_OPTIONS)
    except getopt.GetoptError as exc:
        raise UsageError(f"{exc}\n{HELP_HINT}") from exc

    for flag, value in parsed:
        if flag.startswith("--"):
            name = flag[2:]
            if name == "fq":
                fastq = True
                continue
            if name == "fa":
                fasta = True
                continue
            if name == "verbose":
                opt.verbose = 1
                continue
            key = _LONG_TO_SHORT[name]
        else:
            key = flag[1:]

        if key == "s":
            score = _leading_float(value)
            opt.score = score if score is not None else 0.0
            args.binomial_score = opt.score
        elif key == "f":
            filters_text = value
        elif key == "p":
            opt.output_prefix = value
        elif key == "h":
            args.show_help = True
            return args
        elif key == "I":
            opt.file_interval = _require_int(value, "I", "parameters")
        elif key == "e":
            args.paired = True
        elif key == "i":
            opt.inclusive = True
        elif key == "t":
            opt.threads = _require_int(value, "t")
        elif key == "g":
            opt.file_postfix = ".gz"
        elif key == "l":
            tokens = value.split()
            if not tokens:
                raise UsageError(
                    f"Error - Invalid set of bloom filter parameters! l: {value}"
                )
            args.file_list = tokens[0]
        elif key == "v":
            args.show_version = True
            return args
        elif key == "r":
            opt.streak_threshold = _require_int(value, "r")
        elif key == "c":
            args.ordered = True
        elif key == "d":
            args.stdout = True
        elif key == "n":
            opt.inverse = True
        elif key == "S":
            if value == "harmonic":
                opt.scoring_method = ScoringMethod.HARMONIC
            elif value == "binomial":
                opt.scoring_method = ScoringMethod.BINOMIAL
            else:
                errors.append(
                    "scoring method not recognized. "
                    "Valid strings: harmonic or binomial"
                )
                die = True
        elif key == "m":
            opt.multi_thresh = 1.0
        elif key == "w":
            if opt.mode is FilteringMode.STD:
                opt.mode = FilteringMode.SCORES
            else:
                errors.append("Filter scoring modes cannot be mixed with score mode")
                die = True
        elif key == "b":
            if opt.mode is FilteringMode.STD:
                opt.mode = FilteringMode.BESTHIT
            else:
                errors.append(
                    "Filter scoring modes cannot be mixed with best hit mode"
                )
                die = True
        elif key == "D":
            opt.dust = True
        elif key == "T":
            opt.dust_t = _leading_int(value) or 0
        elif key == "W":
            opt.dust_window = _leading_int(value) or 0
        # "o" (--min_hit_only) is accepted and has no effect.

    args.filter_files = convert_input_string(filters_text)
    args.input_files = list(rest)
    opt.paired = args.paired
    opt.stdout = args.stdout
    opt.filters_file = filters_text

    if args.paired:
        if len(args.input_files) == 1:
            args.smart_pair = True
        elif len(args.input_files) != 2 and not args.file_list:
            errors.append(
                "Usage of paired end mode:\n"
                "biobloomcategorizer [OPTION]... -f \"[FILTER1]...\" "
                "[FILEPAIR1] [FILEPAIR2]\n"
                "or biobloomcategorizer [OPTION]... -f \"[FILTER1]...\" [SMARTPAIR]"
            )
            die = True
    if args.file_list and args.input_files:
        errors.append(
            "--file_list (-l) cannot be used with read files in specified in arguments"
        )
        die = True
    if not args.input_files and not args.file_list:
        errors.append("Error: Need Input File")
        die = True
    if not args.filter_files:
        errors.append("Error: Need Filter File (-f)")
        die = True
    if die:
        raise UsageError("\n".join([*errors, HELP_HINT]))

    if "/" in opt.output_prefix:
        folder_check(opt.output_prefix[: opt.output_prefix.rfind("/")])

    if fastq and fasta:
        raise UsageError(
            "Error: fasta (--fa) and fastq (--fq) outputs types cannot be both set"
        )
    if fastq:
        opt.output_type = OutputType.FASTQ
        args.output_type = "fq"
    elif fasta:
        opt.output_type = OutputType.FASTA
        args.output_type = "fa"

    if opt.mode is FilteringMode.SCORES and opt.output_type is OutputType.NONE:
        raise UsageError("Error: -w option cannot be used without output method")
    return args


def resolve_score(args: CategorizerArgs) -> str:
    """Turn the raw -s value into the threshold used for matching.

    Returns the message describing the threshold that is in effect.
    """
    opt = args.options
    if opt.mode is FilteringMode.BESTHIT:
        return "Best Hit mode (no minimum threshold)"
    if opt.scoring_method is ScoringMethod.BINOMIAL:
        opt.score = 10.0 ** (-(args.binomial_score / 10.0))
        return f"FPR of a match: {opt.score:g}"
    if opt.score < 0:
        raise UsageError(
            "Error - s must be a positive integer or a floating point between "
            f"0 and 1. Input given:{opt.score:g}"
        )
    match_len = int(opt.score)
    if match_len > 1:
        opt.score = float(match_len)
        opt.scoring_method = ScoringMethod.LENGTH
        return f"Min match length threshold: {match_len} bp"
    return f"Min score threshold: {opt.score:g}"