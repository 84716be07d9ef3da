from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from granacred.store.models import AccountType, WithdrawalRequest


class IdentifierIn(BaseModel):
    # Raw keystrokes are fine: separators are stripped before validation
    cpf: str = ""


class WithdrawalIn(BaseModel):
    phone: str = ""
    bank: str = ""
    agency: str = ""
    account: str = ""
    account_type: AccountType = AccountType.CHECKING

    def to_request(self) -> WithdrawalRequest:
        return WithdrawalRequest(
            phone=self.phone,
            bank=self.bank,
            agency=self.agency,
            account=self.account,
            account_type=self.account_type,
        )


class ResultOut(BaseModel):
    status: Literal["eligible", "pending_authorization", "not_eligible", "error", "unknown"]
    message: str = ""
    amount: Optional[float] = None
    formalization_url: Optional[str] = None


class FormOut(BaseModel):
    phone: str = ""
    bank: str = ""
    agency: str = ""
    account: str = ""
    account_type: AccountType = AccountType.CHECKING


class WorkflowSnapshot(BaseModel):
    state: str
    identifier: str = ""
    identifier_display: str = ""
    identifier_valid: bool = False
    show_invalid_hint: bool = False
    remembered: bool = False
    busy: bool = False
    result: Optional[ResultOut] = None
    form: Optional[FormOut] = None
    form_error: Optional[str] = None
    allowed_actions: List[str] = Field(default_factory=list)


class InstructionsOut(BaseModel):
    image_url: str


class LinkOpenOut(BaseModel):
    opened: bool
    url: Optional[str] = None


class LinksOut(BaseModel):
    support: str
    referral: str
