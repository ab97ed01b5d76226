import pytest

from biobloomcat.cli import (
    CategorizerArgs,
    UsageError,
    convert_input_string,
    file_exists,
    folder_check,
    parse_args,
    read_file_list,
    resolve_score,
)
from biobloomcat.options import FilteringMode, OutputType, ScoringMethod


def test_convert_input_string_splits_on_whitespace():
    assert convert_input_string("  a.bf\tb.bf  c.bf ") == ["a.bf", "b.bf", "c.bf"]
    assert convert_input_string("") == []


def test_parse_basic_single_end():
    args = parse_args(["-f", "one.bf two.bf", "-p", "out", "reads.fq"])
    assert args.filter_files == ["one.bf", "two.bf"]
    assert args.input_files == ["reads.fq"]
    assert args.options.output_prefix == "out"
    assert args.paired is False
    assert args.output_type == ""
    assert args.options.score == pytest.approx(0.15)


def test_parse_long_options_and_flags():
    args = parse_args([
        "--filter_files=a.bf", "--fq", "--gz_output", "--inclusive",
        "--threads=4", "--streak", "5", "--verbose", "r.fq",
    ])
    assert args.output_type == "fq"
    assert args.options.output_type is OutputType.FASTQ
    assert args.options.file_postfix == ".gz"
    assert args.options.inclusive is True
    assert args.options.threads == 4
    assert args.options.streak_threshold == 5
    assert args.options.verbose == 1


def test_fasta_output():
    args = parse_args(["-f", "a.bf", "--fa", "r.fa"])
    assert args.output_type == "fa"
    assert args.options.output_type is OutputType.FASTA


def test_help_and_version_stop_parsing():
    assert parse_args(["-h"]).show_help is True
    assert parse_args(["--version"]).show_version is True


def test_missing_inputs_and_filters():
    with pytest.raises(UsageError) as info:
        parse_args([])
    text = str(info.value)
    assert "Error: Need Input File" in text
    assert "Error: Need Filter File (-f)" in text
    assert text.endswith("Try '--help' for more information.")


def test_unknown_option_is_usage_error():
    with pytest.raises(UsageError):
        parse_args(["--bogus", "-f", "a.bf", "r.fq"])


def test_paired_modes():
    two = parse_args(["-e", "-f", "a.bf", "r1.fq", "r2.fq"])
    assert two.paired and not two.smart_pair
    one = parse_args(["-e", "-f", "a.bf", "mixed.fq"])
    assert one.smart_pair is True
    with pytest.raises(UsageError):
        parse_args(["-e", "-f", "a.bf", "r1.fq", "r2.fq", "r3.fq"])


def test_file_list_conflicts_with_inputs():
    with pytest.raises(UsageError):
        parse_args(["-l", "list.txt", "-f", "a.bf", "r.fq"])
    args = parse_args(["-l", "list.txt", "-f", "a.bf"])
    assert args.file_list == "list.txt"
    assert args.input_files == []


def test_fa_and_fq_together_rejected():
    with pytest.raises(UsageError):
        parse_args(["-f", "a.bf", "--fa", "--fq", "r.fq"])


def test_with_score_needs_output_type():
    with pytest.raises(UsageError):
        parse_args(["-f", "a.bf", "-w", "r.fq"])
    args = parse_args(["-f", "a.bf", "-w", "--fq", "r.fq"])
    assert args.options.mode is FilteringMode.SCORES


def test_best_hit_and_with_score_cannot_mix():
    with pytest.raises(UsageError):
        parse_args(["-f", "a.bf", "-b", "-w", "--fq", "r.fq"])


def test_scoring_type_values():
    args = parse_args(["-f", "a.bf", "-S", "harmonic", "r.fq"])
    assert args.options.scoring_method is ScoringMethod.HARMONIC
    with pytest.raises(UsageError):
        parse_args(["-f", "a.bf", "-S", "other", "r.fq"])


def test_invalid_thread_count():
    with pytest.raises(UsageError):
        parse_args(["-f", "a.bf", "-t", "many", "r.fq"])


def test_resolve_score_length_mode():
    args = parse_args(["-f", "a.bf", "-s", "150", "r.fq"])
    message = resolve_score(args)
    assert args.options.scoring_method is ScoringMethod.LENGTH
    assert args.options.score == 150.0
    assert "150" in message


def test_resolve_score_fraction_unchanged():
    args = parse_args(["-f", "a.bf", "-s", "0.5", "r.fq"])
    resolve_score(args)
    assert args.options.scoring_method is ScoringMethod.SIMPLE
    assert args.options.score == pytest.approx(0.5)


def test_resolve_score_binomial_default():
    args = parse_args(["-f", "a.bf", "-S", "binomial", "r.fq"])
    resolve_score(args)
    assert args.options.score == pytest.approx(1e-10)


def test_resolve_score_best_hit_leaves_score():
    args = parse_args(["-f", "a.bf", "-b", "-s", "0.4", "r.fq"])
    assert resolve_score(args) == "Best Hit mode (no minimum threshold)"
    assert args.options.score == pytest.approx(0.4)


def test_resolve_score_negative_rejected():
    args = CategorizerArgs()
    args.options.score = -0.5
    with pytest.raises(UsageError):
        resolve_score(args)


def test_folder_check(tmp_path):
    folder_check(str(tmp_path))
    afile = tmp_path / "f.txt"
    afile.write_text("x")
    with pytest.raises(NotADirectoryError):
        folder_check(str(afile))
    with pytest.raises(FileNotFoundError):
        folder_check(str(tmp_path / "missing"))


def test_prefix_folder_checked_during_parse(tmp_path):
    with pytest.raises(FileNotFoundError):
        parse_args(["-f", "a.bf", "-p", str(tmp_path / "nope" / "out"), "r.fq"])
    args = parse_args(["-f", "a.bf", "-p", str(tmp_path / "out"), "r.fq"])
    assert args.options.output_prefix.endswith("out")


def test_file_exists(tmp_path):
    path = tmp_path / "a.bf"
    assert file_exists(str(path)) is False
    path.write_bytes(b"")
    assert file_exists(str(path)) is True


def test_read_file_list(tmp_path):
    path = tmp_path / "list.txt"
    path.write_text("a_1.fq a_2.fq\nsingle.fq\n")
    first, second = read_file_list(str(path))
    assert first == ["a_1.fq", "single.fq"]
    assert second == ["a_2.fq", ""]