"""
Apna SAHE Backend — Points Ledger Helpers
===========================================

What:  The read-modify-write step that changes a user's `points` and
       `notesUploaded` counters inside a Firestore transaction.
Why:   Note upload, note deletion and manual awards all change the same two
       counters. Doing it inside the caller's transaction keeps the counters
       consistent with the note documents even under concurrent uploads
       (Firestore retries the transaction on contention).

Invariants:
    - Counters never go below zero.
    - A missing user document is left alone (no document is created).
    - Reads happen before any write in the transaction, as Firestore requires.
"""

from typing import Any, Dict, Optional


async def read_counters(transaction, user_ref) -> Optional[Dict[str, Any]]:
    """Transactional read of a user document; None if it does not exist."""
    snapshot = await user_ref.get(transaction=transaction)
    if not snapshot.exists:
        return None
    return snapshot.to_dict() or {}


def write_counters(
    transaction,
    user_ref,
    current: Dict[str, Any],
    points_delta: int,
    notes_delta: int,
) -> Dict[str, int]:
    """Stage the counter update on the transaction and return the new values."""
    updated = {
        "points": max(0, (current.get("points") or 0) + points_delta),
        "notesUploaded": max(0, (current.get("notesUploaded") or 0) + notes_delta),
    }
    transaction.update(user_ref, updated)
    return updated


async def adjust_counters(transaction, user_ref, points_delta: int, notes_delta: int) -> Optional[Dict[str, int]]:
    """
    Read then update a user's counters within `transaction`.

    Only safe as the first step of a transaction body, since it reads.
    Returns the new counters, or None when the user does not exist.
    """
    current = await read_counters(transaction, user_ref)
    if current is None:
        return None
    return write_counters(transaction, user_ref, current, points_delta, notes_delta)
