from app.services.contact_status import (
    ContactStatus,
    InvalidTransitionError,
    can_transition,
    promote_after_response,
    transition,
)
from app.services.result import Result
from app.services.text_extractor import extract_message_text, parse_interactive_reply
