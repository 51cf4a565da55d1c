"""Tests for comparison methods and outcomes."""

import pytest

from treecmp.exceptions import InvalidMethodError, InvalidReferenceError
from treecmp.outcome import ComparisonOutcome, Evidence, Method, Verdict


class TestMethod:
    def test_parse_names(self):
        assert Method.parse("archive") is Method.ARCHIVE
        assert Method.parse("TREE") is Method.TREE
        assert Method.parse(" listing ") is Method.LISTING
        assert Method.parse(Method.DIFF) is Method.DIFF

    def test_parse_invalid(self):
        with pytest.raises(InvalidMethodError) as exc_info:
            Method.parse("checksum")
        assert "checksum" in str(exc_info.value)

    def test_uses_algorithm(self):
        assert Method.ARCHIVE.uses_algorithm
        assert Method.LISTING.uses_algorithm
        assert not Method.TREE.uses_algorithm
        assert not Method.DIFF.uses_algorithm

    def test_str(self):
        assert str(Method.ARCHIVE) == "archive"


class TestOutcome:
    def test_exit_codes(self):
        ev = Evidence("tree", "a" * 40, "b" * 40)
        assert ComparisonOutcome.identical(Method.TREE, ev).exit_code == 0
        assert ComparisonOutcome.different(Method.TREE, ev).exit_code == 1
        err = InvalidReferenceError("nope")
        assert ComparisonOutcome.failed(Method.TREE, err).exit_code == 2

    def test_failed_carries_cause(self):
        err = InvalidReferenceError("nope")
        outcome = ComparisonOutcome.failed(Method.DIFF, err)
        assert outcome.verdict is Verdict.ERROR
        assert outcome.error is err
        assert outcome.evidence is None
        assert outcome.describe() == "Invalid reference: 'nope'"

    def test_describe_short_circuit(self):
        tree = "0123456789abcdef" * 2 + "01234567"
        outcome = ComparisonOutcome.identical(
            Method.ARCHIVE, Evidence("tree", tree, tree), short_circuited=True,
        )
        assert outcome.describe() == "Content identical (same tree object: 0123456789ab...)"

    def test_describe_checksums(self):
        ev = Evidence("archive", "f" * 64, "e" * 64)
        assert ComparisonOutcome.different(Method.ARCHIVE, ev).describe() == \
            "Content differs (archive checksums differ)"
        same = Evidence("listing", "f" * 64, "f" * 64)
        assert ComparisonOutcome.identical(Method.LISTING, same).describe() == \
            "Content identical (listing checksum: ffffffffffff...)"

    def test_describe_diff(self):
        ev = Evidence("diff", detail="diff found differences")
        assert ComparisonOutcome.different(Method.DIFF, ev).describe() == \
            "Content differs (diff found differences)"

    def test_evidence_short_without_value(self):
        assert Evidence("diff").short == ""
