"""Tests for release selection."""

import pytest

from gitpins.domain.semver import parse_version
from gitpins.services.release_selector import latest_release, LatestRelease


PREFIXED_TAGS = ["foo/1.0", "bar/2.0", "baz/2.0-pre", "zes/1.0", "zes/2.0", "zes/2.1-b1"]


class TestLatestRelease:
    """Tests for latest_release."""

    def test_picks_highest_version(self):
        result = latest_release(["0.9", "1.10", "1.9", "v1.2"])
        assert result == LatestRelease(tag="1.10", name="1.10")

    def test_no_parseable_tags(self):
        assert latest_release(["latest", "nightly", "stable"]) is None

    def test_no_tags(self):
        assert latest_release([]) is None

    def test_skips_unparseable_tags(self):
        result = latest_release(["nightly", "1.0", "release-candidate"])
        assert result.name == "1.0"

    def test_upper_bound_excludes_pre_releases(self):
        result = latest_release(
            ["1.0", "2.0", "2.0-pre"],
            pre_releases=False,
            version_upper_bound=parse_version("2"),
        )
        assert result.name == "1.0"

    def test_upper_bound_with_pre_releases(self):
        result = latest_release(
            ["1.0", "2.0", "2.0-pre"],
            pre_releases=True,
            version_upper_bound=parse_version("2"),
        )
        assert result.name == "2.0-pre"

    def test_upper_bound_is_exclusive(self):
        result = latest_release(["1.0", "1.5", "2.0"], version_upper_bound=parse_version("1.5"))
        assert result.name == "1.0"

    def test_upper_bound_excluding_everything(self):
        assert latest_release(["3.0", "4.0"], version_upper_bound=parse_version("2.0")) is None

    def test_pre_releases_excluded_by_default(self):
        assert latest_release(["1.0", "1.1-rc1"]).name == "1.0"
        assert latest_release(["1.0", "1.1-rc1"], pre_releases=True).name == "1.1-rc1"

    def test_only_pre_releases(self):
        assert latest_release(["1.0-alpha", "1.0-beta"]) is None

    def test_prefix(self):
        result = latest_release(PREFIXED_TAGS, prefix="zes/")
        assert result.tag == "zes/2.0"
        assert result.name == "2.0"

    def test_prefix_with_pre_releases(self):
        result = latest_release(PREFIXED_TAGS, prefix="zes/", pre_releases=True)
        assert result.tag == "zes/2.1-b1"
        assert result.name == "2.1-b1"

    def test_prefix_without_matches(self):
        assert latest_release(PREFIXED_TAGS, prefix="qux/") is None

    def test_unprefixed_tags_ignore_prefixed_ones(self):
        # "zes/2.0" does not parse as a version without the prefix stripped
        assert latest_release(PREFIXED_TAGS + ["0.1"]).name == "0.1"

    def test_keeps_raw_tag_spelling(self):
        result = latest_release(["v1.0", "v1.2"])
        assert result == LatestRelease(tag="v1.2", name="v1.2")

    def test_accepts_generators(self):
        result = latest_release(tag for tag in ["1.0", "2.0"])
        assert result.name == "2.0"

    @pytest.mark.parametrize("bound", ["1.0", "1.5", "2.0", "2.0-rc1", "10"])
    def test_result_is_below_bound(self, bound):
        tags = ["0.1", "1.0", "1.4.9", "1.5", "2.0-rc1", "2.0", "3.1"]
        upper = parse_version(bound)
        result = latest_release(tags, pre_releases=True, version_upper_bound=upper)
        selected = parse_version(result.name)
        assert selected < upper
        for tag in tags:
            version = parse_version(tag)
            assert version >= upper or version <= selected
