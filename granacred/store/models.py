from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class RemoteStatus(str, Enum):
    ELIGIBLE = "eligible"
    PENDING_AUTHORIZATION = "pending_authorization"
    NOT_ELIGIBLE = "not_eligible"
    ERROR = "error"
    # Anything the service sends that we do not recognize
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw) -> "RemoteStatus":
        if isinstance(raw, str):
            try:
                return cls(raw.strip().lower())
            except ValueError:
                pass
        return cls.UNKNOWN


class AccountType(str, Enum):
    # Wire values expected by the service
    CHECKING = "corrente"
    SAVINGS = "poupanca"


@dataclass(frozen=True)
class RemoteResult:
    status: RemoteStatus
    message: str = ""
    # Present only for ELIGIBLE
    amount: Optional[float] = None
    formalization_url: Optional[str] = None

    @property
    def has_formalization(self) -> bool:
        return bool(self.formalization_url)

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "message": self.message,
            "amount": self.amount,
            "formalization_url": self.formalization_url,
        }


@dataclass
class WithdrawalRequest:
    phone: str = ""
    bank: str = ""
    agency: str = ""
    account: str = ""
    account_type: AccountType = field(default=AccountType.CHECKING)

    def __post_init__(self):
        # Accept wire strings; anything else stays raw for the form check to report
        if not isinstance(self.account_type, AccountType):
            try:
                self.account_type = AccountType(self.account_type)
            except ValueError:
                pass
