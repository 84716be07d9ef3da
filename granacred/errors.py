"""
Error taxonomy
--------------
- InputValidationError: CPF or withdrawal form rejected locally; nothing is sent.
- InvalidTransition: a trigger that is not legal in the current workflow state.
- GatewayError: the remote call did not complete with a usable JSON object.

Every one of these is recoverable: the workflow always lands in a state where
the user can retry or back out.
"""
from __future__ import annotations

from typing import Optional


class GranaCredError(Exception):
    code = "granacred_error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class InputValidationError(GranaCredError):
    code = "invalid_input"

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class WorkflowError(GranaCredError):
    code = "workflow_error"


class InvalidTransition(WorkflowError):
    code = "invalid_transition"

    def __init__(self, trigger: str, state):
        state_name = getattr(state, "value", state)
        super().__init__(f"'{trigger}' is not allowed while in {state_name}")
        self.trigger = trigger
        self.state = state


class GatewayError(GranaCredError):
    code = "gateway_error"

    def __init__(self, action: str, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.action = action
        self.status_code = status_code
