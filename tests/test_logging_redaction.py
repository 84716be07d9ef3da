import json
from unittest.mock import patch

from granacred.observability.logging import log
from granacred.settings import settings


def _last_line(capsys):
    out = capsys.readouterr().out.strip().splitlines()
    return json.loads(out[-1])


def test_cpf_masked_and_payout_redacted(capsys):
    with patch.object(settings, "ENABLE_PII_REDACTION", True):
        log(event="gateway_send_attempt", action="withdraw", payload={
            "cpf": "52998224725",
            "phone": "11999998888",
            "bank": "001",
            "accountType": "corrente",
        })
    line = _last_line(capsys)
    assert line["event"] == "gateway_send_attempt"
    assert line["action"] == "withdraw"
    assert line["payload"]["cpf"] == "*********25"
    assert line["payload"]["phone"] == "[REDACTED:11chars]"
    assert line["payload"]["bank"] == "[REDACTED:3chars]"
    assert line["payload"]["accountType"] == "corrente"
    assert isinstance(line["ts"], int)


def test_top_level_cpf_masked(capsys):
    with patch.object(settings, "ENABLE_PII_REDACTION", True):
        log(event="session_identifier_saved", cpf="52998224725")
    assert _last_line(capsys)["cpf"] == "*********25"


def test_redaction_disabled_passes_fields_through(capsys):
    with patch.object(settings, "ENABLE_PII_REDACTION", False):
        log(event="session_identifier_saved", cpf="52998224725")
    assert _last_line(capsys)["cpf"] == "52998224725"
