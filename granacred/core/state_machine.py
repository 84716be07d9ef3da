from enum import Enum
from typing import Dict, FrozenSet, Set

from granacred.errors import InvalidTransition
from granacred.store.models import RemoteResult, RemoteStatus


class State(str, Enum):
    # Interaction Surface: CPF entry, no result on screen
    IDLE = "IDLE"

    # Interaction Surface: check/status call outstanding (only close is enabled,
    # and closing abandons the call rather than cancelling it)
    CHECKING = "CHECKING"

    # Interaction Surface: balance available, no withdrawal yet
    # Offers: begin withdrawal, close
    RESULT_ELIGIBLE_OPEN = "RESULT_ELIGIBLE_OPEN"

    # Interaction Surface: withdrawal created, waiting on external formalization
    # Offers: open formalization link, conclude (status), close
    RESULT_ELIGIBLE_FORMALIZED = "RESULT_ELIGIBLE_FORMALIZED"

    # Interaction Surface: user must authorize the app with the benefit program
    # Offers: already authorized (status), view instructions, close
    RESULT_PENDING_AUTHORIZATION = "RESULT_PENDING_AUTHORIZATION"

    # Interaction Surface: informational, close only (check may be re-run)
    RESULT_NOT_ELIGIBLE = "RESULT_NOT_ELIGIBLE"

    # Interaction Surface: call failed or unrecognized answer
    # Offers: retry (same action), close
    RESULT_ERROR = "RESULT_ERROR"

    # Interaction Surface: payout data entry
    WITHDRAWAL_FORM = "WITHDRAWAL_FORM"

    # Interaction Surface: withdraw call outstanding
    SUBMITTING = "SUBMITTING"


# Triggers (user actions)
CHECK = "check"
STATUS = "status"
RETRY = "retry"
BEGIN_WITHDRAWAL = "begin_withdrawal"
CANCEL_WITHDRAWAL = "cancel_withdrawal"
SUBMIT_WITHDRAWAL = "submit_withdrawal"
CLOSE = "close"
VIEW_INSTRUCTIONS = "view_instructions"
OPEN_FORMALIZATION = "open_formalization"

RESULT_STATES: FrozenSet[State] = frozenset({
    State.RESULT_ELIGIBLE_OPEN,
    State.RESULT_ELIGIBLE_FORMALIZED,
    State.RESULT_PENDING_AUTHORIZATION,
    State.RESULT_NOT_ELIGIBLE,
    State.RESULT_ERROR,
})

# States with one remote call outstanding
BUSY_STATES: FrozenSet[State] = frozenset({State.CHECKING, State.SUBMITTING})

# trigger -> states it may fire from
TRANSITIONS: Dict[str, FrozenSet[State]] = {
    CHECK: frozenset({State.IDLE}) | RESULT_STATES,
    STATUS: frozenset({State.RESULT_PENDING_AUTHORIZATION, State.RESULT_ELIGIBLE_FORMALIZED}),
    RETRY: frozenset({State.RESULT_ERROR}),
    BEGIN_WITHDRAWAL: frozenset({State.RESULT_ELIGIBLE_OPEN}),
    CANCEL_WITHDRAWAL: frozenset({State.WITHDRAWAL_FORM}),
    SUBMIT_WITHDRAWAL: frozenset({State.WITHDRAWAL_FORM}),
    # From CHECKING this dismisses the view; the outstanding call becomes stale
    CLOSE: RESULT_STATES | {State.CHECKING},
    # Informational: never change state
    VIEW_INSTRUCTIONS: frozenset({State.RESULT_PENDING_AUTHORIZATION}),
    OPEN_FORMALIZATION: frozenset({State.RESULT_ELIGIBLE_FORMALIZED}),
}

# trigger -> state entered when it fires (informational triggers omitted)
TARGETS: Dict[str, State] = {
    CHECK: State.CHECKING,
    STATUS: State.CHECKING,
    RETRY: State.CHECKING,
    BEGIN_WITHDRAWAL: State.WITHDRAWAL_FORM,
    CANCEL_WITHDRAWAL: State.RESULT_ELIGIBLE_OPEN,
    SUBMIT_WITHDRAWAL: State.SUBMITTING,
    CLOSE: State.IDLE,
}


def is_allowed(trigger: str, state: State) -> bool:
    return state in TRANSITIONS.get(trigger, frozenset())


def ensure_allowed(trigger: str, state: State) -> None:
    if not is_allowed(trigger, state):
        raise InvalidTransition(trigger, state)


def allowed_triggers(state: State) -> Set[str]:
    return {t for t, sources in TRANSITIONS.items() if state in sources}


def state_for_result(result: RemoteResult) -> State:
    """
    Maps a successful remote answer onto the next result state. ERROR and
    UNKNOWN both land in RESULT_ERROR; callers coming from SUBMITTING treat
    that as a failed submission instead.
    """
    if result.status == RemoteStatus.ELIGIBLE:
        if result.has_formalization:
            return State.RESULT_ELIGIBLE_FORMALIZED
        return State.RESULT_ELIGIBLE_OPEN
    if result.status == RemoteStatus.PENDING_AUTHORIZATION:
        return State.RESULT_PENDING_AUTHORIZATION
    if result.status == RemoteStatus.NOT_ELIGIBLE:
        return State.RESULT_NOT_ELIGIBLE
    return State.RESULT_ERROR
