from granacred.core.identifier import normalize
from granacred.core.withdrawal import padded_phone
from granacred.store.models import AccountType, WithdrawalRequest

CHECK = "check"
STATUS = "status"
WITHDRAW = "withdraw"

ACTIONS = (CHECK, STATUS, WITHDRAW)


def build_lookup_payload(identifier: str) -> dict:
    """Payload for check and status."""
    return {"cpf": normalize(identifier)}


def build_withdraw_payload(identifier: str, req: WithdrawalRequest) -> dict:
    account_type = req.account_type
    if isinstance(account_type, AccountType):
        account_type = account_type.value
    return {
        "cpf": normalize(identifier),
        "phone": padded_phone(req.phone),
        "bank": req.bank.strip(),
        "agency": req.agency.strip(),
        "account": req.account.strip(),
        "accountType": account_type,
    }


def build_request_body(action: str, payload: dict) -> dict:
    # The webhook receives the action name alongside the payload fields
    return {"action": action, **payload}
