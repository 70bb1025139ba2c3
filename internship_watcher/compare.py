"""
Compare module for the Internship Watcher.

This module detects postings that are new relative to the previous
snapshot seen in this session. Session state is an explicit object that
is passed in and returned updated, so detection can be tested without a
running scheduler. Nothing here is persisted across restarts.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Set, Tuple

from internship_watcher.models import Record
from internship_watcher.utils import get_logger


# Module logger
logger = get_logger("compare")


@dataclass
class SessionState:
    """
    Identities observed in the most recent successful parse.

    Attributes:
        last_known_identities: Identity keys of the last snapshot. Empty
            until the first successful parse of the session.
    """
    last_known_identities: Set[str] = field(default_factory=set)

    @property
    def is_seeded(self) -> bool:
        return bool(self.last_known_identities)


def build_identity_set(records: List[Record]) -> Set[str]:
    """
    Build the set of identity keys for a snapshot.

    Args:
        records: Parsed records.

    Returns:
        Set of identity strings.
    """
    return {record.identity for record in records}


def find_new_records(current: List[Record], known: Set[str]) -> List[Record]:
    """
    Find records whose identity is not in the known set.

    Document order is kept and duplicate identities in the current
    snapshot are each reported.

    Args:
        current: Newly parsed snapshot.
        known: Previously observed identities.

    Returns:
        List of new records.
    """
    return [record for record in current if record.identity not in known]


def find_removed_identities(current: List[Record], known: Set[str]) -> Set[str]:
    """Identities that were known but are absent from the current snapshot."""
    return known - build_identity_set(current)


def detect_new_records(
    snapshot: List[Record],
    state: SessionState
) -> Tuple[List[Record], SessionState]:
    """
    Compare a snapshot with session state and return the new records.

    The first observation of a session only seeds the state and reports
    nothing. The returned state always holds exactly the snapshot's
    identities, even when the snapshot is empty. The input state is not
    modified.

    Args:
        snapshot: Newly parsed records.
        state: State from the previous successful cycle.

    Returns:
        Tuple of (new_records, updated_state).
    """
    if state.is_seeded:
        new_records = find_new_records(snapshot, state.last_known_identities)
        logger.info(f"Found {len(new_records)} new posting(s)")
    else:
        new_records = []
        logger.info(f"Seeding session with {len(snapshot)} posting(s), no alerts on first observation")

    return new_records, SessionState(last_known_identities=build_identity_set(snapshot))


def get_comparison_summary(snapshot: List[Record], state: SessionState) -> Dict[str, int]:
    """
    Get a summary of the comparison between a snapshot and session state.

    Args:
        snapshot: Newly parsed records.
        state: State from the previous successful cycle.

    Returns:
        Dictionary with comparison statistics.
    """
    known = state.last_known_identities
    current = build_identity_set(snapshot)

    return {
        "current_count": len(snapshot),
        "previous_count": len(known),
        "new_count": len(find_new_records(snapshot, known)) if known else 0,
        "removed_count": len(find_removed_identities(snapshot, known)),
        "unchanged_count": len(current & known),
    }
