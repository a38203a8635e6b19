"""Tests for slug and datetime utilities."""

from datetime import UTC, datetime

from flowboard.utils import from_iso, generate_filename, slugify, to_iso


class TestSlugify:
    """Tests for the slugify function."""

    def test_punctuation_dropped_and_spaces_hyphenated(self):
        assert slugify("Fix Login Bug!") == "fix-login-bug"
        assert slugify("Ship  v2 _ docs") == "ship-v2-docs"

    def test_unicode_folded_to_ascii(self):
        assert slugify("Crème brûlée") == "creme-brulee"

    def test_edges_trimmed(self):
        assert slugify("--  drag & drop --") == "drag-drop"

    def test_nothing_left(self):
        assert slugify("!!!") == ""


class TestGenerateFilename:
    """Tests for task filenames."""

    def test_plain_and_suffixed(self):
        assert generate_filename("Fix Login Bug") == "fix-login-bug.md"
        assert generate_filename("Fix Login Bug", 2) == "fix-login-bug-2.md"

    def test_untitled_fallback(self):
        assert generate_filename("???") == "untitled.md"


class TestIsoHelpers:
    """Tests for ISO datetime conversion."""

    def test_round_trip_with_z_suffix(self):
        parsed = from_iso("2024-05-01T12:30:00Z")

        assert parsed == datetime(2024, 5, 1, 12, 30, tzinfo=UTC)
        assert to_iso(parsed) == "2024-05-01T12:30:00+00:00"

    def test_none_and_datetime_pass_through(self):
        now = datetime.now(UTC)

        assert from_iso(None) is None
        assert from_iso(now) is now
        assert to_iso(None) is None
