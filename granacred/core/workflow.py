"""
Eligibility / Withdrawal Workflow
---------------------------------
Owns the CPF being worked on, the last RemoteResult and the current State.
Every user action goes through here; the presentation layer only reads
`snapshot()`.

Remote actions are split in two steps so an event-driven caller can keep the
round trip off its own loop:

    call = wf.begin_check()                  # guards + IDLE -> CHECKING
    result = gateway.send(call.action, call.payload)
    wf.resolve(call, result)                 # CHECKING -> RESULT_*

`check()`, `status()`, `retry()` and `submit_withdrawal()` do all three steps
inline. Each dispatched call carries a generation number; an answer for a call
that is no longer the outstanding one is dropped, never applied.

Known gap: there is no timeout beyond the gateway's transport timeout and no
user cancellation of a dispatched call.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from granacred.core import state_machine as sm
from granacred.core.state_machine import State
from granacred.core.identifier import format_identifier, normalize, show_invalid_hint, validate
from granacred.core.withdrawal import ensure_submittable
from granacred.errors import InputValidationError
from granacred.gateway.client import WebhookGateway
from granacred.gateway.contract import error_result
from granacred.gateway.payloads import CHECK, STATUS, WITHDRAW, build_lookup_payload, build_withdraw_payload
from granacred.links.deeplink import instructions_image_url, open_uri
from granacred.store.models import RemoteResult, RemoteStatus, WithdrawalRequest
from granacred.store.session_repo import SessionStore, is_remembered, load_identifier, save_identifier
from granacred.observability.logging import log
import granacred.observability.metrics as metrics

# User-facing messages for failed calls
FAILED_MESSAGES = {
    CHECK: "Não foi possível consultar agora.",
    STATUS: "Status indisponível no momento.",
    WITHDRAW: "Não foi possível enviar o saque agora.",
}


@dataclass(frozen=True)
class PendingCall:
    generation: int
    trigger: str
    action: str
    identifier: str
    payload: dict = field(default_factory=dict)


class Workflow:
    def __init__(self, gateway=None, store=None, opener=None):
        self.gateway = gateway or WebhookGateway()
        self.store = store or SessionStore()
        self.opener = opener

        self.state: State = State.IDLE
        self.raw_identifier: str = ""
        self.result: Optional[RemoteResult] = None
        self.form: Optional[WithdrawalRequest] = None
        self.form_error: Optional[str] = None
        self.pending: Optional[PendingCall] = None

        self._generation = 0
        # Action to repeat from RESULT_ERROR
        self._failed_action: Optional[str] = None

    # ------------------------------------------------------------------
    # Identifier / session
    # ------------------------------------------------------------------
    def restore(self) -> bool:
        """Startup: pre-fill the CPF from the session store. Returns remembered."""
        saved = load_identifier(self.store)
        if saved:
            self.raw_identifier = saved
        log(event="workflow_restored", remembered=bool(saved))
        return bool(saved)

    @property
    def remembered(self) -> bool:
        return is_remembered(self.store)

    def set_identifier(self, raw: str) -> bool:
        # A call already dispatched keeps the CPF it was sent with
        self.raw_identifier = raw or ""
        return self.identifier_valid

    @property
    def identifier(self) -> str:
        return normalize(self.raw_identifier)

    @property
    def identifier_valid(self) -> bool:
        return validate(self.raw_identifier)

    @property
    def show_invalid_hint(self) -> bool:
        return show_invalid_hint(self.raw_identifier)

    @property
    def busy(self) -> bool:
        return self.state in sm.BUSY_STATES

    def allowed_actions(self) -> set:
        return sm.allowed_triggers(self.state)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _transition(self, trigger: str, next_state: State) -> None:
        prev = self.state
        self.state = next_state
        log(event="workflow_transition", trigger=trigger,
            fromState=prev.value, toState=next_state.value)

    def _require_identifier(self) -> str:
        if not self.identifier_valid:
            raise InputValidationError("cpf", "CPF inválido. Confira o número informado.")
        return self.identifier

    def _dispatch(self, trigger: str, action: str, payload: dict) -> PendingCall:
        self._generation += 1
        call = PendingCall(
            generation=self._generation,
            trigger=trigger,
            action=action,
            identifier=payload.get("cpf", ""),
            payload=payload,
        )
        self.pending = call
        self._transition(trigger, sm.TARGETS[trigger])
        return call

    def _is_current(self, call: PendingCall) -> bool:
        return self.pending is not None and self.pending.generation == call.generation

    def _drop_stale(self, call: PendingCall, outcome: str) -> None:
        metrics.increment_stale_dropped()
        log(event="workflow_stale_response", action=call.action, generation=call.generation,
            currentGeneration=self._generation, state=self.state.value, outcome=outcome)

    def _lookup(self, trigger: str, action: str) -> PendingCall:
        sm.ensure_allowed(trigger, self.state)
        identifier = self._require_identifier()
        return self._dispatch(trigger, action, build_lookup_payload(identifier))

    # ------------------------------------------------------------------
    # Remote actions: begin step
    # ------------------------------------------------------------------
    def begin_check(self) -> PendingCall:
        return self._lookup(sm.CHECK, CHECK)

    def begin_status(self) -> PendingCall:
        return self._lookup(sm.STATUS, STATUS)

    def begin_retry(self) -> PendingCall:
        return self._lookup(sm.RETRY, self._failed_action or CHECK)

    def begin_submit(self, request: WithdrawalRequest) -> PendingCall:
        sm.ensure_allowed(sm.SUBMIT_WITHDRAWAL, self.state)
        self.form = request
        identifier = self._require_identifier()
        try:
            ensure_submittable(request)
        except InputValidationError as e:
            self.form_error = e.message
            log(event="withdrawal_rejected", field=e.field)
            raise
        self.form_error = None
        return self._dispatch(sm.SUBMIT_WITHDRAWAL, WITHDRAW, build_withdraw_payload(identifier, request))

    # ------------------------------------------------------------------
    # Remote actions: resolution step
    # ------------------------------------------------------------------
    def resolve(self, call: PendingCall, result: RemoteResult) -> bool:
        """Applies a gateway answer. Returns False if the call was stale."""
        if not self._is_current(call):
            self._drop_stale(call, outcome=result.status.value)
            return False
        self.pending = None

        if call.action == WITHDRAW:
            if result.status in (RemoteStatus.ERROR, RemoteStatus.UNKNOWN):
                # Stay in the form with the data intact
                self.form_error = result.message or FAILED_MESSAGES[WITHDRAW]
                self._transition("withdraw_failed", State.WITHDRAWAL_FORM)
                return True
            self.result = result
            self.form = None
            self.form_error = None
            self._transition("withdraw_resolved", sm.state_for_result(result))
            return True

        self.result = result
        next_state = sm.state_for_result(result)
        if next_state == State.RESULT_ERROR:
            self._failed_action = call.action
            if not result.message:
                self.result = error_result(FAILED_MESSAGES[call.action])
        self._transition(f"{call.action}_resolved", next_state)

        if call.action == CHECK and next_state != State.RESULT_ERROR and not self.remembered:
            save_identifier(self.store, call.identifier)
        return True

    def fail(self, call: PendingCall, error: Exception) -> bool:
        """Maps a failed gateway call. Returns False if the call was stale."""
        if not self._is_current(call):
            self._drop_stale(call, outcome="failure")
            return False
        self.pending = None
        log(event="workflow_call_failed", action=call.action,
            errorType=type(error).__name__, error=str(error)[:200])

        if call.action == WITHDRAW:
            self.form_error = FAILED_MESSAGES[WITHDRAW]
            self._transition("withdraw_failed", State.WITHDRAWAL_FORM)
            return True

        self._failed_action = call.action
        self.result = error_result(FAILED_MESSAGES[call.action])
        self._transition(f"{call.action}_failed", State.RESULT_ERROR)
        return True

    def _run(self, call: PendingCall) -> State:
        # Any exception ends the call; a busy state must never outlive it
        try:
            result = self.gateway.send(call.action, call.payload)
        except Exception as e:
            self.fail(call, e)
        else:
            self.resolve(call, result)
        return self.state

    # ------------------------------------------------------------------
    # Remote actions: one-shot
    # ------------------------------------------------------------------
    def check(self) -> State:
        return self._run(self.begin_check())

    def status(self) -> State:
        return self._run(self.begin_status())

    def retry(self) -> State:
        return self._run(self.begin_retry())

    def submit_withdrawal(self, request: WithdrawalRequest) -> State:
        return self._run(self.begin_submit(request))

    # ------------------------------------------------------------------
    # Local actions
    # ------------------------------------------------------------------
    def begin_withdrawal(self) -> State:
        sm.ensure_allowed(sm.BEGIN_WITHDRAWAL, self.state)
        self.form = WithdrawalRequest()
        self.form_error = None
        self._transition(sm.BEGIN_WITHDRAWAL, sm.TARGETS[sm.BEGIN_WITHDRAWAL])
        return self.state

    def cancel_withdrawal(self) -> State:
        sm.ensure_allowed(sm.CANCEL_WITHDRAWAL, self.state)
        self.form = None
        self.form_error = None
        self._transition(sm.CANCEL_WITHDRAWAL, sm.TARGETS[sm.CANCEL_WITHDRAWAL])
        return self.state

    def close(self) -> State:
        sm.ensure_allowed(sm.CLOSE, self.state)
        if self.pending is not None:
            log(event="workflow_call_abandoned", action=self.pending.action,
                generation=self.pending.generation)
            self.pending = None
        self.result = None
        self.form = None
        self.form_error = None
        self._transition(sm.CLOSE, sm.TARGETS[sm.CLOSE])
        return self.state

    def view_instructions(self) -> str:
        sm.ensure_allowed(sm.VIEW_INSTRUCTIONS, self.state)
        log(event="workflow_instructions_viewed")
        return instructions_image_url()

    def open_formalization(self) -> bool:
        sm.ensure_allowed(sm.OPEN_FORMALIZATION, self.state)
        return open_uri(self.result.formalization_url, self.opener)

    # ------------------------------------------------------------------
    def snapshot(self) -> dict:
        form = None
        if self.form is not None:
            form = {
                "phone": self.form.phone,
                "bank": self.form.bank,
                "agency": self.form.agency,
                "account": self.form.account,
                "account_type": getattr(self.form.account_type, "value", str(self.form.account_type)),
            }
        return {
            "state": self.state.value,
            "identifier": self.identifier,
            "identifier_display": format_identifier(self.raw_identifier),
            "identifier_valid": self.identifier_valid,
            "show_invalid_hint": self.show_invalid_hint,
            "remembered": self.remembered,
            "busy": self.busy,
            "result": self.result.to_dict() if self.result else None,
            "form": form,
            "form_error": self.form_error,
            "allowed_actions": sorted(self.allowed_actions()),
        }
