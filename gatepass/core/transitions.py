"""User status transitions applied when a request is approved."""

from gatepass.models.gate_request import GATE_REQUEST_TYPES, OUT_OF_HOSTEL_REQUEST_TYPE

STATUS_IN = 'in'
STATUS_OUT = 'out'
STATUS_HOME = 'home'

GATE_CATEGORY = 'gate'
OUT_OF_HOSTEL_CATEGORY = 'out_of_hostel'

STATUS_TRANSITIONS = {
    (STATUS_IN, GATE_CATEGORY): STATUS_OUT,
    (STATUS_OUT, GATE_CATEGORY): STATUS_IN,
    (STATUS_HOME, GATE_CATEGORY): STATUS_IN,
    (STATUS_IN, OUT_OF_HOSTEL_CATEGORY): STATUS_HOME,
    (STATUS_OUT, OUT_OF_HOSTEL_CATEGORY): STATUS_HOME,
    (STATUS_HOME, OUT_OF_HOSTEL_CATEGORY): STATUS_HOME,
}


class InvalidTransitionError(ValueError):
    """Raised when no status transition is defined for a status/request pair."""

    def __init__(self, current_status: str | None, request_type: str | None) -> None:
        self.current_status = current_status
        self.request_type = request_type
        super().__init__(
            f"No status transition from '{current_status}' for a '{request_type}' request."
        )


def request_category(request_type: str | None) -> str | None:
    if request_type in GATE_REQUEST_TYPES:
        return GATE_CATEGORY
    if request_type == OUT_OF_HOSTEL_REQUEST_TYPE:
        return OUT_OF_HOSTEL_CATEGORY
    return None


def next_status(current_status: str | None, request_type: str | None) -> str:
    normalized_status = (current_status or '').strip().lower()
    category = request_category(request_type)

    try:
        return STATUS_TRANSITIONS[(normalized_status, category)]
    except KeyError:
        raise InvalidTransitionError(current_status, request_type) from None
