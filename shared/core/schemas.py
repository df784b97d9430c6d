from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Any, Dict, Optional

from shared.wrappers.empty_string_model_wrapper import EmptyStringModel


class SessionClaims(BaseModel):
    """Decoded Clerk session token."""
    user_id: str
    session_id: Optional[str] = None
    role: Optional[str] = None
    metadata: Dict[str, Any] = {}
    exp: Optional[int] = None


class CommonQueryParams(EmptyStringModel):
    search: Optional[str] = None
    skip: Optional[int] = 0
    limit: Optional[int] = 100


class PaginationInfo(BaseModel):
    total: int
    page: int
    limit: int
    totalPages: int


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys, still populated by snake_case names."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
