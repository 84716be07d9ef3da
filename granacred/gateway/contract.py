"""
Remote Result Contract
----------------------
The webhook answers with an untyped JSON object:

    {"status": "...", "message": "...", "amount": 1500.5, "formalization_url": "https://..."}

We turn it into an immutable RemoteResult:
- status is closed over RemoteStatus; anything unrecognized becomes UNKNOWN
- amount survives only for ELIGIBLE and only when it is a non-negative number
- formalization_url survives only for ELIGIBLE and only when it is a non-empty string
- missing optional fields are simply absent, never an error
"""

from __future__ import annotations

import math
from typing import Any, Optional

from granacred.store.models import RemoteResult, RemoteStatus


def _as_text(v: Any) -> str:
    if v is None:
        return ""
    return v if isinstance(v, str) else str(v)


def _as_amount(v: Any) -> Optional[float]:
    # bool is an int subclass; "true" is not a balance
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return None
    f = float(v)
    if math.isnan(f) or math.isinf(f) or f < 0:
        return None
    return f


def _as_url(v: Any) -> Optional[str]:
    if isinstance(v, str) and v.strip():
        return v.strip()
    return None


def parse_remote_result(data: Any, *, default_status: Optional[str] = None) -> RemoteResult:
    """
    `default_status` fills in an absent/empty status (the withdraw action
    echoes `eligible` implicitly). A status that is present but unrecognized
    is never defaulted.
    """
    if not isinstance(data, dict):
        return RemoteResult(status=RemoteStatus.UNKNOWN)

    raw_status = data.get("status")
    if (raw_status is None or raw_status == "") and default_status:
        raw_status = default_status
    status = RemoteStatus.parse(raw_status)

    amount = None
    link = None
    if status == RemoteStatus.ELIGIBLE:
        amount = _as_amount(data.get("amount"))
        link = _as_url(data.get("formalization_url"))

    return RemoteResult(
        status=status,
        message=_as_text(data.get("message")),
        amount=amount,
        formalization_url=link,
    )


def error_result(message: str) -> RemoteResult:
    """Synthetic result shown when the call itself failed."""
    return RemoteResult(status=RemoteStatus.ERROR, message=message)
