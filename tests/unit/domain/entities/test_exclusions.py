"""Tests for channel exclusion rules."""

import pytest

from slack_butler.domain.entities.exclusions import ExclusionSet


class TestExclusionSetParse:
    def test_empty_strings_exclude_nothing(self) -> None:
        exclusions = ExclusionSet.parse("", "")

        assert exclusions.names == frozenset()
        assert exclusions.prefixes == frozenset()
        assert exclusions.is_excluded("general") is False

    def test_trims_whitespace_and_drops_empty_entries(self) -> None:
        exclusions = ExclusionSet.parse(" general , ,random,", "test- , ")

        assert exclusions.names == frozenset({"general", "random"})
        assert exclusions.prefixes == frozenset({"test-"})

    def test_strips_leading_hash(self) -> None:
        exclusions = ExclusionSet.parse("#general", "#ops-")

        assert exclusions.names == frozenset({"general"})
        assert exclusions.prefixes == frozenset({"ops-"})


class TestIsExcluded:
    @pytest.fixture
    def exclusions(self) -> ExclusionSet:
        return ExclusionSet.parse("general,random", "test-,temp-")

    @pytest.mark.parametrize("name", ["general", "random", "#general"])
    def test_exact_names(self, exclusions: ExclusionSet, name: str) -> None:
        assert exclusions.is_excluded(name) is True

    @pytest.mark.parametrize("name", ["test-channel", "temp-", "temp-1"])
    def test_prefixes(self, exclusions: ExclusionSet, name: str) -> None:
        assert exclusions.is_excluded(name) is True

    @pytest.mark.parametrize(
        "name",
        [
            "general-backup",  # name match is exact, not a prefix
            "testing",  # "test-" requires the hyphen
            "my-general",
            "General",  # case-sensitive
        ],
    )
    def test_not_excluded(self, exclusions: ExclusionSet, name: str) -> None:
        assert exclusions.is_excluded(name) is False
