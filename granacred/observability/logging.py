import json
import time
from granacred.settings import settings

# Identifier-like fields keep their last two digits so support can correlate lines
MASKED_KEYS = {"cpf", "identifier"}
# Payout data and free text are fully redacted
SENSITIVE_KEYS = {"phone", "bank", "agency", "account", "message"}

def _mask_identifier(v):
    if isinstance(v, str) and len(v) > 2:
        return "*" * (len(v) - 2) + v[-2:]
    return v

def _redact_value(v):
    if isinstance(v, str) and len(v) > 0:
        return f"[REDACTED:{len(v)}chars]"
    if isinstance(v, dict):
        return {k: _redact_value(val) for k, val in v.items()}
    return v

def _clean(k, v):
    if k in MASKED_KEYS:
        return _mask_identifier(v)
    if k in SENSITIVE_KEYS:
        return _redact_value(v)
    if isinstance(v, dict):
        # Nested objects like a gateway payload: redact only sensitive members
        return {sk: _clean(sk, sv) for sk, sv in v.items()}
    return v

def log(event: str, **fields):
    payload = {"ts": int(time.time()), "event": event}

    if settings.ENABLE_PII_REDACTION:
        payload.update({k: _clean(k, v) for k, v in fields.items()})
    else:
        payload.update(fields)

    print(json.dumps(payload, ensure_ascii=False, default=str))
