# SPDX-License-Identifier: MIT
"""Tests for version precedence."""

import pytest
from hypothesis import given, strategies as st

from tyler_version import compare_versions, version_key

numbers = st.integers(min_value=0, max_value=50)
prerelease = st.none() | st.lists(
    st.sampled_from(["alpha", "beta", "rc", "0", "1", "2", "11"]), min_size=1, max_size=3
).map(".".join)
version_strings = st.builds(
    lambda major, minor, patch, pre: f"{major}.{minor}.{patch}" + (f"-{pre}" if pre else ""),
    numbers,
    numbers,
    numbers,
    prerelease,
)


class TestCompareVersions:
    """Tests for compare_versions function."""

    @pytest.mark.parametrize(
        "lower,higher",
        [
            ("0.1.0", "0.2.0"),
            ("0.2.0", "0.10.0"),
            ("0.9.9", "1.0.0"),
            ("1.0.0-alpha", "1.0.0"),
            ("1.0.0-alpha", "1.0.0-alpha.1"),
            ("1.0.0-alpha.1", "1.0.0-alpha.beta"),
            ("1.0.0-alpha.beta", "1.0.0-beta"),
            ("1.0.0-beta.2", "1.0.0-beta.11"),
            ("1.0.0-beta.11", "1.0.0-rc.1"),
        ],
    )
    def test_ordering(self, lower, higher):
        """Test the SemVer precedence examples."""
        assert compare_versions(lower, higher) == -1
        assert compare_versions(higher, lower) == 1

    def test_build_metadata_is_ignored(self):
        assert compare_versions("1.0.0+build.1", "1.0.0+build.2") == 0

    @given(version_strings, version_strings)
    def test_antisymmetric(self, a, b):
        assert compare_versions(a, b) == -compare_versions(b, a)

    @given(version_strings, version_strings)
    def test_sort_key_agrees_with_compare(self, a, b):
        """Test that version_key orders exactly like compare_versions."""
        expected = compare_versions(a, b)
        key_a, key_b = version_key(a), version_key(b)
        assert (key_a > key_b) - (key_a < key_b) == expected

    @given(st.lists(version_strings, min_size=1, max_size=8))
    def test_sorted_maximum(self, values):
        ordered = sorted(values, key=version_key)
        assert all(compare_versions(ordered[-1], v) >= 0 for v in values)
