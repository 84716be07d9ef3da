from granacred.gateway.payloads import build_lookup_payload, build_request_body, build_withdraw_payload
from granacred.store.models import AccountType, WithdrawalRequest


def test_lookup_payload_uses_digits_only():
    assert build_lookup_payload("529.982.247-25") == {"cpf": "52998224725"}


def test_withdraw_payload_matches_webhook_fields():
    req = WithdrawalRequest(phone="11 99999-8888", bank=" 237 ", agency="0001",
                            account="123456-7", account_type=AccountType.SAVINGS)
    payload = build_withdraw_payload("52998224725", req)
    assert payload == {
        "cpf": "52998224725",
        "phone": "11999998888",
        "bank": "237",
        "agency": "0001",
        "account": "123456-7",
        "accountType": "poupanca",
    }


def test_request_body_carries_action():
    assert build_request_body("status", {"cpf": "1"}) == {"action": "status", "cpf": "1"}
