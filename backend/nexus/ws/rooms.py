"""
Two-party chat room naming.
"""

ROOM_SEPARATOR = ":"


def room_id(participant_a: str, participant_b: str) -> str:
    """
    Deterministic room identifier for an unordered pair of participants.

    Both sides compute the same value regardless of who initiates:
    room_id(a, b) == room_id(b, a).
    """
    first, second = sorted((str(participant_a), str(participant_b)))
    return f"{first}{ROOM_SEPARATOR}{second}"
