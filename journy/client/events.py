from __future__ import annotations

import datetime
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional, Union

from journy.client.identity import AccountIdentified, UserIdentified

Scalar = Union[str, int, float, bool, datetime.datetime]
Value = Union[Scalar, List[Scalar], None]
Properties = Mapping[str, Value]
Metadata = Mapping[str, Scalar]


def format_datetime(value: datetime.datetime) -> str:
    # naive datetimes are taken to be UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    value = value.astimezone(datetime.timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def stringify_value(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime.datetime):
        return format_datetime(value)
    if isinstance(value, (list, tuple)):
        return [stringify_value(v) for v in value]
    return str(value)


def stringify_properties(properties: Properties) -> Dict[str, Any]:
    return {key: stringify_value(value) for key, value in properties.items()}


@dataclass(frozen=True)
class Event:
    name: str
    user: Optional[UserIdentified] = None
    account: Optional[AccountIdentified] = None
    date: Optional[datetime.datetime] = None
    metadata: Mapping[str, Scalar] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Event name cannot be empty!")
        if self.user is None and self.account is None:
            raise ValueError("User or account needs to set!")

    @classmethod
    def for_user(cls, name: str, user: UserIdentified) -> "Event":
        return cls(name, user=user)

    @classmethod
    def for_account(cls, name: str, account: AccountIdentified) -> "Event":
        return cls(name, account=account)

    @classmethod
    def for_user_in_account(
        cls, name: str, user: UserIdentified, account: AccountIdentified
    ) -> "Event":
        return cls(name, user=user, account=account)

    def happened_at(self, date: datetime.datetime) -> "Event":
        return replace(self, date=date)

    def with_metadata(self, metadata: Metadata) -> "Event":
        return replace(self, metadata={**self.metadata, **metadata})

    def to_request_payload(self) -> Dict[str, Any]:
        identification: Dict[str, Any] = {}
        if self.user is not None:
            identification["user"] = self.user.encode()
        if self.account is not None:
            identification["account"] = self.account.encode()

        payload: Dict[str, Any] = {
            "identification": identification,
            "name": self.name,
        }
        if self.date is not None:
            payload["triggeredAt"] = format_datetime(self.date)
        if self.metadata:
            payload["metadata"] = stringify_properties(self.metadata)
        return payload
