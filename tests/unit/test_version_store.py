"""Tests for the VersionStore: recording, de-duplication and cursor navigation."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from revwatch.errors import EmptyHistoryError
from revwatch.history.store import VersionStore
from revwatch.models.snapshot import RecordStatus, Snapshot

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _store_with(*contents: str) -> VersionStore:
    store = VersionStore()
    for content in contents:
        store.record(content)
    return store


# ---------------------------------------------------------------------------
# record()
# ---------------------------------------------------------------------------


class TestRecord:
    def test_first_record_appends_at_zero(self) -> None:
        store = VersionStore()
        outcome = store.record("hello\n")
        assert outcome.status == RecordStatus.APPENDED
        assert outcome.appended
        assert outcome.index == 0
        assert len(store) == 1

    def test_identical_content_is_unchanged(self) -> None:
        store = _store_with("a\n")
        outcome = store.record("a\n")
        assert outcome.status == RecordStatus.UNCHANGED
        assert outcome.index is None
        assert len(store) == 1

    def test_different_content_appends_next_index(self) -> None:
        store = _store_with("a\n")
        outcome = store.record("b\n")
        assert outcome.appended
        assert outcome.index == 1
        assert store[1].content == "b\n"

    def test_comparison_is_exact_about_whitespace(self) -> None:
        """Trailing whitespace and line endings are never normalised away."""
        store = _store_with("a\n")
        assert store.record("a \n").appended
        assert store.record("a \r\n").appended
        assert len(store) == 3

    def test_a_b_a_keeps_three_entries(self) -> None:
        """Only back-to-back duplicates are merged."""
        store = _store_with("a\n", "b\n", "a\n")
        assert [s.content for s in store] == ["a\n", "b\n", "a\n"]

    def test_dedup_compares_against_latest_not_first(self) -> None:
        store = _store_with("a\n")
        store.record("b\n")
        outcome = store.record("b\n")
        assert not outcome.appended
        assert len(store) == 2

    def test_empty_string_is_a_valid_version(self) -> None:
        store = _store_with("text\n")
        assert store.record("").appended
        assert store.latest().content == ""

    def test_record_does_not_move_cursor(self) -> None:
        store = _store_with("0", "1", "2", "3")
        store.advance()
        assert store.cursor == 1
        store.record("4")
        store.record("5")
        assert store.cursor == 1

    @given(st.text(), st.text())
    def test_second_record_appends_iff_different(self, a: str, b: str) -> None:
        store = VersionStore()
        store.record(a)
        store.record(b)
        assert len(store) == (2 if a != b else 1)

    @given(st.lists(st.sampled_from(["a", "b", "c"]), max_size=30))
    def test_no_adjacent_duplicates(self, contents: list[str]) -> None:
        store = _store_with(*contents)
        history = [s.content for s in store]
        assert all(x != y for x, y in zip(history, history[1:], strict=False))


# ---------------------------------------------------------------------------
# current() / peek_next() / accessors
# ---------------------------------------------------------------------------


class TestAccessors:
    def test_current_on_empty_store_raises(self) -> None:
        with pytest.raises(EmptyHistoryError):
            VersionStore().current()

    def test_latest_on_empty_store_raises(self) -> None:
        with pytest.raises(EmptyHistoryError):
            VersionStore().latest()

    def test_current_returns_seed(self) -> None:
        store = _store_with("seed\n")
        assert store.current().content == "seed\n"

    def test_peek_next_none_with_single_entry(self) -> None:
        assert _store_with("only").peek_next() is None

    def test_peek_next_returns_following_snapshot(self) -> None:
        store = _store_with("a", "b", "c")
        assert store.peek_next() is store[1]

    def test_previous_of(self) -> None:
        store = _store_with("a", "b")
        assert store.previous_of(1) is store[0]
        assert store.previous_of(0) is None
        assert store.previous_of(5) is None

    def test_snapshot_equality_ignores_timestamps(self) -> None:
        first = Snapshot(content="x")
        second = Snapshot(content="x")
        assert first == second
        assert second.captured_at >= first.captured_at

    def test_snapshots_are_immutable(self) -> None:
        snapshot = _store_with("x").current()
        with pytest.raises(AttributeError):
            snapshot.content = "y"  # type: ignore[misc]

    def test_line_count(self) -> None:
        assert Snapshot(content="").line_count == 0
        assert Snapshot(content="a\nb\n").line_count == 2
        assert Snapshot(content="a\nb").line_count == 2


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------


class TestNavigation:
    def test_advance_on_empty_is_noop(self) -> None:
        store = VersionStore()
        assert store.advance() == 0
        assert store.retreat() == 0

    def test_advance_with_one_entry_is_noop(self) -> None:
        store = _store_with("a")
        assert store.advance() == 0
        assert store.retreat() == 0

    def test_two_entries_cursor_stays_on_zero(self) -> None:
        """With two entries the only browsable pair is 0 -> 1."""
        store = _store_with("a", "b")
        assert store.advance() == 0
        assert store.retreat() == 0
        assert store.peek_next() is store[1]

    def test_advance_wraps_within_len_minus_two(self) -> None:
        store = _store_with("0", "1", "2", "3", "4")
        seen = [store.advance() for _ in range(4)]
        assert seen == [1, 2, 3, 0]

    def test_retreat_from_zero_wraps_to_last_but_one(self) -> None:
        store = _store_with("0", "1", "2", "3", "4")
        assert store.retreat() == 3
        assert store.retreat() == 2

    def test_retreat_inverts_advance(self) -> None:
        store = _store_with("0", "1", "2", "3")
        for _ in range(5):
            before = store.cursor
            store.advance()
            assert store.retreat() == before
            store.advance()

    def test_new_version_becomes_reachable(self) -> None:
        store = _store_with("0", "1", "2")
        store.advance()
        assert store.advance() == 0  # range [0, 1]
        store.record("3")
        assert store.advance() == 1
        assert store.advance() == 2
        assert store.peek_next() is store[3]

    def test_cursor_stable_when_recording_at_k(self) -> None:
        store = _store_with("0", "1", "2", "3", "4", "5")
        store.advance()
        store.advance()
        assert store.cursor == 2
        store.record("6")
        assert store.cursor == 2
        assert store.current().content == "2"

    @given(st.lists(st.sampled_from(["advance", "retreat", "record"]), max_size=60))
    def test_peek_next_always_available_while_browsing(self, actions: list[str]) -> None:
        store = _store_with("v0")
        counter = 1
        for action in actions:
            if action == "record":
                store.record(f"v{counter}")
                counter += 1
            elif action == "advance":
                store.advance()
            else:
                store.retreat()
            assert 0 <= store.cursor <= max(len(store) - 2, 0)
            if len(store) >= 2:
                assert store.peek_next() is not None
