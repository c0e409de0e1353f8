from __future__ import annotations

from enum import Enum
from typing import Generic, List, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

DataT = TypeVar("DataT")


class APIError(str, Enum):
    ServerError = "ServerError"
    UnauthorizedError = "UnauthorizedError"
    BadArgumentsError = "BadArgumentsError"
    TooManyRequests = "TooManyRequests"
    NotFoundError = "NotFoundError"
    Forbidden = "Forbidden"
    Unprocessable = "Unprocessable"
    UnknownError = "UnknownError"


class Success(BaseModel, Generic[DataT]):
    model_config = ConfigDict(frozen=True)

    success: Literal[True] = True
    request_id: Optional[str] = None
    calls_remaining: Optional[int] = None
    data: Optional[DataT] = None


class Failure(BaseModel):
    model_config = ConfigDict(frozen=True)

    success: Literal[False] = False
    request_id: Optional[str] = None
    calls_remaining: Optional[int] = None
    error: APIError


Result = Union[Success[DataT], Failure]


# Response payloads
class ApiKeyDetails(BaseModel):
    permissions: List[str] = Field(default_factory=list)


class TrackingSnippetResponse(BaseModel):
    domain: str
    snippet: str
