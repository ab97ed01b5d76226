# biobloomcat

biobloomcat sorts sequencing reads into categories by testing their k-mers
against a set of filters, one filter per category. Each read (or read pair)
ends up matching one filter, several filters, or none, and a tab-separated
summary reports how many reads fell into each category.

Input may be FASTA or FASTQ, plain or gzip-compressed.

## Installation

```
pip install biobloomcat
```

## Modules

- `biobloomcat.options` — the `Options` dataclass holding run settings
  (score threshold, output prefix and postfix, filtering mode, scoring
  method, streak threshold, progress interval, and so on), and the
  `OutputType`, `FilteringMode` and `ScoringMethod` enumerations.
- `biobloomcat.seqeval` — the scoring algorithms.
  - `KmerSetFilter(kmer_size, kmers, fpr)` is an in-memory set of canonical
    k-mers (a k-mer and its reverse complement are treated alike) carrying a
    nominal false-positive rate; test membership with `contains` or `in`.
  - `iter_kmers(seq, kmer_size)` yields `(position, kmer)` for every window
    made only of A, C, G and T.
  - `eval_read(rec, bloom, threshold, method, streak_threshold, subtract)`
    decides whether a read matches a filter; `eval_score(rec, bloom, method,
    streak_threshold, subtract)` computes its full score. The per-method
    functions (`eval_simple`, `eval_harmonic`, `eval_binomial`,
    `eval_min_match_len` and their `*_score` counterparts) are available
    directly, as are `calc_min_count`, `calc_prob_matches`,
    `normalize_score` and `denormalize_score`.
  - An optional `subtract` filter keeps k-mers it contains from adding to
    the score.
- `biobloomcat.results` — `ResultsManager(filter_order, inclusive)` tallies
  hits per filter. `update(hits)` records one read and `update_pair(hits1,
  hits2)` a read pair (in inclusive mode a hit on either mate counts,
  otherwise both mates must hit the same filter); both return the output
  index, which is the filter's index, `no_match_index` or
  `multi_match_index`. `summary(read_count)` renders the table with the
  columns `filter_id`, `hits`, `misses`, `shared`, `rate_hit`, `rate_miss`,
  `rate_shared`, followed by `multiMatch` and `noMatch` rows.
- `biobloomcat.seqio` — `read_records(path)` yields `Record` objects
  (`header`, `seq`, `qual`, `comment`); `format_fasta`, `format_fastq` and
  `format_scores` write them back out; `strip_mate_suffix` drops a `/1` or
  `/2` style mate suffix from a read name.
- `biobloomcat.evaluator` — `ReadEvaluator(filters, score_threshold,
  options)` applies the filtering modes: standard (every filter above
  threshold), ordered (first matching filter wins), best hit (filters
  sharing the highest positive score) and scores (matches plus every
  filter's score). Results come back as `ReadEvaluation` objects.
- `biobloomcat.classifier` — `BioBloomClassifier(filters, filter_ids,
  options, stdout, err)` runs whole files through the filters. `filter`
  writes only the summary; `filter_print` also writes each read to the file
  of its category. Both return the number of reads processed.
  `set_ordered_filter`, `set_inclusive` and `set_stdout` adjust the run;
  with `set_stdout`, reads matching the first filter (or, when
  `options.inverse` is set, all other reads) are echoed as FASTQ.
- `biobloomcat.paired` — `PairedClassifier` extends the classifier for
  paired-end input: `filter_pair` and `filter_pair_print` for two mate
  files, `filter_smart_pair` and `filter_smart_pair_print` for one file in
  which mates are matched by name, and `filter_pair_lists` for matching
  lists of mate files.
- `biobloomcat.cli` — command-line parsing: `parse_args(argv)` returns a
  `CategorizerArgs` or raises `UsageError`; `resolve_score(args)` turns the
  `-s` value into the threshold in effect (a fraction, a false-positive
  rate for binomial scoring, or a minimum match length in bases when it is
  an integer above 1) and returns a message describing it. Helpers
  `convert_input_string`, `folder_check`, `file_exists` and
  `read_file_list` are also provided.

## Scoring a read

```python
from biobloomcat.options import ScoringMethod
from biobloomcat.seqeval import KmerSetFilter, eval_read, eval_score

bloom = KmerSetFilter(4, {"ACGT", "CGTA", "GTAC"}, 0.01)

matched = eval_read("ACGTACGT", bloom, 0.15, ScoringMethod.SIMPLE, 3, None)
score = eval_score("ACGTACGT", bloom, ScoringMethod.SIMPLE, 3, None)
```

## Classifying files

```python
from biobloomcat.classifier import BioBloomClassifier
from biobloomcat.options import Options
from biobloomcat.seqeval import KmerSetFilter

human = KmerSetFilter(4, {"ACGT", "CGTA"}, 0.01)
virus = KmerSetFilter(4, {"TTTT", "GGGG"}, 0.01)

options = Options(output_prefix="run")
classifier = BioBloomClassifier([human, virus], ["human", "virus"], options)
classifier.filter_print(["reads.fq.gz"], "fq")
```

## Output files

Categorized reads go to `<prefix>_<filter_id>.<fa|fq><postfix>`, plus
`<prefix>_noMatch...` and `<prefix>_multiMatch...`. Paired runs write `_1`
and `_2` files for each category. Files whose names end in `.gz` are written
gzip-compressed. The summary goes to `<prefix>_summary.tsv`.

## What it does not do

- There is no installed command. `biobloomcat.cli` parses and checks
  arguments, but nothing in the package turns a `CategorizerArgs` into a
  run; the caller builds the filters and calls the classifier.
- Filters are not loaded from disk. `KmerSetFilter` is built in memory from
  k-mers you supply; there is no reader for stored filter files or their
  info files.
- The `dust`, `dust_t` and `dust_window` settings are parsed but low
  complexity masking is not applied during scoring.
- The `threads` setting is parsed but reads are processed one at a time.