"""Checkout pipeline stages and the forward-only transitions between them."""

START = "START"
METHOD_CHECKED = "METHOD_CHECKED"
CONFIG_CHECKED = "CONFIG_CHECKED"
PAYLOAD_PARSED = "PAYLOAD_PARSED"
EMAIL_VALIDATED = "EMAIL_VALIDATED"
REQUEST_BUILT = "REQUEST_BUILT"
UPSTREAM_CALLED = "UPSTREAM_CALLED"
SUCCEEDED = "SUCCEEDED"
FAILED = "FAILED"

ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    START: {METHOD_CHECKED, FAILED},
    METHOD_CHECKED: {CONFIG_CHECKED, FAILED},
    CONFIG_CHECKED: {PAYLOAD_PARSED, FAILED},
    PAYLOAD_PARSED: {EMAIL_VALIDATED, FAILED},
    EMAIL_VALIDATED: {REQUEST_BUILT, FAILED},
    REQUEST_BUILT: {UPSTREAM_CALLED, FAILED},
    UPSTREAM_CALLED: {SUCCEEDED, FAILED},
    SUCCEEDED: set(),
    FAILED: set(),
}

TERMINAL_STAGES = frozenset({SUCCEEDED, FAILED})


def validate_transition(current: str, new: str) -> None:
    """Raise when a transition is not allowed by the state machine."""

    if new not in ALLOWED_TRANSITIONS.get(current, set()):
        raise ValueError(f"Invalid transition: {current} -> {new}")


def is_terminal(stage: str) -> bool:
    return stage in TERMINAL_STAGES
