from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class UserIdentified:
    user_id: Optional[str] = None
    email: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.user_id and not self.email:
            raise ValueError("User ID or email needs to set!")

    @classmethod
    def by_user_id(cls, user_id: str) -> "UserIdentified":
        return cls(user_id=user_id)

    @classmethod
    def by_email(cls, email: str) -> "UserIdentified":
        return cls(email=email)

    def encode(self) -> Dict[str, str]:
        encoded: Dict[str, str] = {}
        if self.user_id:
            encoded["userId"] = self.user_id
        if self.email:
            encoded["email"] = self.email
        return encoded


@dataclass(frozen=True)
class AccountIdentified:
    account_id: Optional[str] = None
    domain: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.account_id and not self.domain:
            raise ValueError("Account ID or domain needs to set!")

    @classmethod
    def by_account_id(cls, account_id: str) -> "AccountIdentified":
        return cls(account_id=account_id)

    @classmethod
    def by_domain(cls, domain: str) -> "AccountIdentified":
        return cls(domain=domain)

    def encode(self) -> Dict[str, str]:
        encoded: Dict[str, str] = {}
        if self.account_id:
            encoded["accountId"] = self.account_id
        if self.domain:
            encoded["domain"] = self.domain
        return encoded
