import io

import pytest

from biobloomcat.options import Options
from biobloomcat.paired import PairedClassifier
from biobloomcat.seqeval import KmerSetFilter, iter_kmers
from biobloomcat.seqio import Record, format_fastq

MATCH1 = "ACGTACGTAAGGCCTTAGCA"
MATCH2 = "GGATCCAGTCAGTTCAGGCA"
MISS = "TTTTTTTTTTTTTTTTTTTT"
K = 5


def make_filter():
    kmers = [km for seq in (MATCH1, MATCH2) for _, km in iter_kmers(seq, K)]
    return KmerSetFilter(K, kmers)


def write_fastq(path, reads):
    with open(path, "w") as handle:
        for name, seq in reads:
            handle.write(f"@{name}\n{seq}\n+\n{'I' * len(seq)}\n")
    return str(path)


def make_classifier(tmp_path, **opts):
    options = Options(output_prefix=str(tmp_path / "out"), **opts)
    out = io.StringIO()
    clf = PairedClassifier([make_filter()], ["a"], options=options,
                           stdout=out, err=io.StringIO())
    return clf, out


def read_summary(tmp_path):
    text = (tmp_path / "out_summary.tsv").read_text()
    return {line.split("\t")[0]: line.split("\t")
            for line in text.splitlines()[1:]}


def test_filter_pair_counts_matching_pairs(tmp_path):
    f1 = write_fastq(tmp_path / "r1.fq", [("p1/1", MATCH1), ("p2/1", MISS)])
    f2 = write_fastq(tmp_path / "r2.fq", [("p1/2", MATCH2), ("p2/2", MISS)])
    clf, _ = make_classifier(tmp_path)
    assert clf.filter_pair(f1, f2) == 2
    summary = read_summary(tmp_path)
    assert summary["a"][1] == "1"
    assert summary["noMatch"][1] == "1"
    assert summary["multiMatch"][1] == "0"


def test_filter_pair_stops_at_shorter_file(tmp_path):
    f1 = write_fastq(tmp_path / "r1.fq",
                     [("p1/1", MATCH1), ("p2/1", MISS), ("p3/1", MATCH1)])
    f2 = write_fastq(tmp_path / "r2.fq", [("p1/2", MATCH2), ("p2/2", MISS)])
    clf, _ = make_classifier(tmp_path)
    assert clf.filter_pair(f1, f2) == 2


def test_one_mate_match_requires_inclusive(tmp_path):
    f1 = write_fastq(tmp_path / "r1.fq", [("p1/1", MATCH1)])
    f2 = write_fastq(tmp_path / "r2.fq", [("p1/2", MISS)])
    clf, _ = make_classifier(tmp_path)
    clf.filter_pair(f1, f2)
    assert read_summary(tmp_path)["noMatch"][1] == "1"

    clf2, _ = make_classifier(tmp_path)
    clf2.set_inclusive()
    clf2.filter_pair(f1, f2)
    summary = read_summary(tmp_path)
    assert summary["a"][1] == "1"
    assert summary["noMatch"][1] == "0"


def test_filter_pair_print_writes_mates_to_category_files(tmp_path):
    f1 = write_fastq(tmp_path / "r1.fq", [("p1/1", MATCH1), ("p2/1", MISS)])
    f2 = write_fastq(tmp_path / "r2.fq", [("p1/2", MATCH2), ("p2/2", MISS)])
    clf, _ = make_classifier(tmp_path)
    assert clf.filter_pair_print(f1, f2, "fq") == 2
    a1 = (tmp_path / "out_a_1.fq").read_text()
    a2 = (tmp_path / "out_a_2.fq").read_text()
    assert a1 == format_fastq(Record("p1/1", MATCH1, "I" * len(MATCH1)))
    assert a2 == format_fastq(Record("p1/2", MATCH2, "I" * len(MATCH2)))
    nm1 = (tmp_path / "out_noMatch_1.fq").read_text()
    assert nm1.startswith("@p2/1")
    assert (tmp_path / "out_multiMatch_2.fq").read_text() == ""


def test_smart_pair_joins_mates_and_prints_to_stdout(tmp_path):
    path = write_fastq(tmp_path / "mixed.fq",
                       [("p1/1", MATCH1), ("x/1", MISS),
                        ("p1/2", MATCH2), ("x/2", MISS)])
    clf, out = make_classifier(tmp_path)
    clf.set_stdout()
    assert clf.filter_smart_pair(path) == 2
    expected = (format_fastq(Record("p1", MATCH1, "I" * len(MATCH1)))
                + format_fastq(Record("p1", MATCH2, "I" * len(MATCH2))))
    assert out.getvalue() == expected


def test_smart_pair_print_uses_stripped_headers(tmp_path):
    path = write_fastq(tmp_path / "mixed.fq",
                       [("p1/1", MATCH1), ("p1/2", MATCH2), ("lonely/1", MISS)])
    clf, _ = make_classifier(tmp_path)
    assert clf.filter_smart_pair_print(path, "fa") == 1
    assert (tmp_path / "out_a_1.fa").read_text() == f">p1 \n{MATCH1}\n"
    assert (tmp_path / "out_a_2.fa").read_text() == f">p1 \n{MATCH2}\n"


def test_inverse_stdout_prints_unmatched_pairs(tmp_path):
    f1 = write_fastq(tmp_path / "r1.fq", [("p1/1", MATCH1), ("p2/1", MISS)])
    f2 = write_fastq(tmp_path / "r2.fq", [("p1/2", MATCH2), ("p2/2", MISS)])
    clf, out = make_classifier(tmp_path, inverse=True)
    clf.set_stdout()
    clf.filter_pair(f1, f2)
    text = out.getvalue()
    assert "@p2/1" in text and "@p2/2" in text
    assert "@p1/1" not in text


def test_filter_pair_lists_sums_over_file_pairs(tmp_path):
    a1 = write_fastq(tmp_path / "a1.fq", [("p1/1", MATCH1)])
    a2 = write_fastq(tmp_path / "a2.fq", [("p1/2", MATCH2)])
    b1 = write_fastq(tmp_path / "b1.fq", [("q1/1", MISS), ("q2/1", MATCH1)])
    b2 = write_fastq(tmp_path / "b2.fq", [("q1/2", MISS), ("q2/2", MATCH1)])
    clf, _ = make_classifier(tmp_path)
    assert clf.filter_pair_lists([a1, b1], [a2, b2]) == 3
    summary = read_summary(tmp_path)
    assert summary["a"][1] == "2"
    assert summary["noMatch"][1] == "1"


def test_filter_pair_lists_rejects_uneven_lists(tmp_path):
    a1 = write_fastq(tmp_path / "a1.fq", [("p1/1", MATCH1)])
    clf, _ = make_classifier(tmp_path)
    with pytest.raises(ValueError):
        clf.filter_pair_lists([a1, a1], [a1])


def test_missing_file_raises(tmp_path):
    f1 = write_fastq(tmp_path / "r1.fq", [("p1/1", MATCH1)])
    clf, _ = make_classifier(tmp_path)
    with pytest.raises(OSError):
        clf.filter_pair(f1, str(tmp_path / "absent.fq"))


def test_print_requires_output_type(tmp_path):
    from biobloomcat.options import OutputType

    f1 = write_fastq(tmp_path / "r1.fq", [("p1/1", MATCH1)])
    clf, _ = make_classifier(tmp_path)
    with pytest.raises(ValueError):
        clf.filter_pair_print(f1, f1, OutputType.NONE)