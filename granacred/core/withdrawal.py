from typing import List, Tuple

from granacred.settings import settings
from granacred.store.models import AccountType, WithdrawalRequest
from granacred.core.identifier import only_digits
from granacred.errors import InputValidationError


def phone_digits(phone: str) -> str:
    return only_digits(phone)


def padded_phone(phone: str) -> str:
    return phone_digits(phone).zfill(int(settings.PHONE_PAD_LENGTH))


def find_problems(req: WithdrawalRequest) -> List[Tuple[str, str]]:
    """
    Returns (field, user message) pairs for every rule the form breaks.
    Empty list means the request may be submitted.
    """
    problems: List[Tuple[str, str]] = []
    if len(phone_digits(req.phone)) < int(settings.PHONE_MIN_DIGITS):
        problems.append(("phone", "Telefone inválido. Informe DDD + número."))
    for name in ("bank", "agency", "account"):
        if not (getattr(req, name) or "").strip():
            problems.append((name, "Preencha banco, agência e conta."))
    if not isinstance(req.account_type, AccountType):
        problems.append(("account_type", "Tipo de conta inválido."))
    return problems


def ensure_submittable(req: WithdrawalRequest) -> None:
    problems = find_problems(req)
    if problems:
        field, message = problems[0]
        raise InputValidationError(field, message)
