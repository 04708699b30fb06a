from enum import Enum


class ContactStatus(str, Enum):
    NEW = "NEW"
    KNOWN = "KNOWN"
    CLIENT = "CLIENT"


VALID_TRANSITIONS = {
    ContactStatus.NEW: [ContactStatus.KNOWN],
    ContactStatus.KNOWN: [],
    ContactStatus.CLIENT: [],
}


class InvalidTransitionError(Exception):
    def __init__(self, from_status: ContactStatus, to_status: ContactStatus):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"Invalid transition: {from_status.value} -> {to_status.value}")


def coerce_status(value) -> ContactStatus:
    """Stored status, treating missing/unknown values as NEW."""
    try:
        return ContactStatus(value)
    except ValueError:
        return ContactStatus.NEW


def can_transition(from_status: ContactStatus, to_status: ContactStatus) -> bool:
    """Check if transition is valid."""
    allowed = VALID_TRANSITIONS.get(from_status, [])
    return to_status in allowed


def transition(from_status: ContactStatus, to_status: ContactStatus) -> ContactStatus:
    """Perform status transition. Raises InvalidTransitionError if not allowed."""
    if not can_transition(from_status, to_status):
        raise InvalidTransitionError(from_status, to_status)
    return to_status


def initial_status(is_roster_client: bool) -> ContactStatus:
    """Status for a contact seen for the first time."""
    return ContactStatus.CLIENT if is_roster_client else ContactStatus.NEW


def promote_after_response(current: ContactStatus) -> ContactStatus:
    """A NEW contact becomes KNOWN once the bot has answered it; others keep their status."""
    try:
        return transition(current, ContactStatus.KNOWN)
    except InvalidTransitionError:
        return current
