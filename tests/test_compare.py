"""
Tests for the compare module.

Tests cover:
- Identity derivation
- Detection of new records
- First-observation seeding
- Unconditional state replacement
- Duplicate identities in a snapshot
- Comparison summary
"""

from internship_watcher.compare import (
    SessionState,
    build_identity_set,
    detect_new_records,
    find_new_records,
    find_removed_identities,
    get_comparison_summary,
)
from internship_watcher.models import Record


def make_record(company, role="SWE Intern", location="NYC", link="", date_posted="Sep 01"):
    return Record(
        company=company,
        role=role,
        location=location,
        link=link,
        date_posted=date_posted,
    )


A = make_record("Acme")
B = make_record("Bolt")
C = make_record("Cogs")


class TestIdentity:
    """Tests for record identity."""

    def test_identity_concatenates_fields(self):
        """Test identity is company + role + location."""
        assert A.identity == "AcmeSWE InternNYC"

    def test_link_and_date_ignored(self):
        """Test that link and date do not affect identity."""
        moved = make_record("Acme", link="https://new.example.com", date_posted="Oct 01")

        assert moved.identity == A.identity

    def test_build_identity_set(self):
        assert build_identity_set([A, B, A]) == {A.identity, B.identity}

    def test_build_identity_set_empty(self):
        assert build_identity_set([]) == set()


class TestFindNewRecords:
    """Tests for new record detection."""

    def test_find_new_entries(self):
        """Test that unseen identities are returned in order."""
        new = find_new_records([A, C, B], {A.identity})

        assert new == [C, B]

    def test_no_new_entries(self):
        assert find_new_records([A, B], {A.identity, B.identity}) == []

    def test_duplicates_preserved(self):
        """Test that duplicate rows are each reported."""
        duplicate = make_record("Cogs", link="https://other.example.com")

        new = find_new_records([A, C, duplicate], {A.identity})

        assert new == [C, duplicate]

    def test_find_removed(self):
        """Test identities missing from the current snapshot."""
        removed = find_removed_identities([A], {A.identity, B.identity})

        assert removed == {B.identity}


class TestDetectNewRecords:
    """Tests for session-aware detection."""

    def test_first_cycle_seeds_silently(self):
        """Test that the first observation reports nothing."""
        new, state = detect_new_records([A, B], SessionState())

        assert new == []
        assert state.last_known_identities == {A.identity, B.identity}

    def test_second_cycle_reports_addition(self):
        """Test that a later cycle reports exactly the added record."""
        _, state = detect_new_records([A, B], SessionState())

        new, state = detect_new_records([A, B, C], state)

        assert new == [C]
        assert state.last_known_identities == {A.identity, B.identity, C.identity}

    def test_unchanged_feed_reports_nothing(self):
        """Test that repeated identical snapshots never alert."""
        _, state = detect_new_records([A, B], SessionState())

        for _ in range(3):
            new, state = detect_new_records([A, B], state)
            assert new == []

    def test_state_replaced_not_merged(self):
        """Test that removed identities are forgotten."""
        _, state = detect_new_records([A, B], SessionState())

        _, state = detect_new_records([C], state)

        assert state.last_known_identities == {C.identity}

    def test_reappearing_record_is_new_again(self):
        """Test that a record removed and re-added is reported."""
        _, state = detect_new_records([A, B], SessionState())
        _, state = detect_new_records([A], state)

        new, _ = detect_new_records([A, B], state)

        assert new == [B]

    def test_empty_snapshot_clears_state(self):
        """Test that an empty parse is a valid state."""
        _, state = detect_new_records([A, B], SessionState())

        new, state = detect_new_records([], state)

        assert new == []
        assert state.last_known_identities == set()

    def test_after_empty_snapshot_next_cycle_reseeds(self):
        """Test that an empty state behaves like the first observation."""
        new, state = detect_new_records([], SessionState())
        assert state.is_seeded is False

        new, state = detect_new_records([A], state)

        assert new == []
        assert state.is_seeded is True

    def test_input_state_not_mutated(self):
        """Test that detection returns a new state object."""
        original = SessionState(last_known_identities={A.identity})

        _, updated = detect_new_records([A, B], original)

        assert original.last_known_identities == {A.identity}
        assert updated is not original


class TestComparisonSummary:
    """Tests for the comparison summary."""

    def test_summary_counts(self):
        state = SessionState(last_known_identities={A.identity, B.identity})

        summary = get_comparison_summary([A, C], state)

        assert summary == {
            "current_count": 2,
            "previous_count": 2,
            "new_count": 1,
            "removed_count": 1,
            "unchanged_count": 1,
        }

    def test_summary_first_observation(self):
        """Test that nothing counts as new before seeding."""
        summary = get_comparison_summary([A, B], SessionState())

        assert summary["new_count"] == 0
        assert summary["previous_count"] == 0
