from typing import Generic, TypeVar, List, Optional
from pydantic import BaseModel, ConfigDict, model_serializer
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base model exposing camelCase keys on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ApiResponse(BaseModel, Generic[T]):
    """Uniform response envelope. Unset optional members are omitted."""
    success: bool
    message: Optional[str] = None
    errors: Optional[List[str]] = None
    data: Optional[T] = None

    @model_serializer(mode="wrap")
    def _omit_empty(self, handler):
        payload = handler(self)
        return {key: value for key, value in payload.items() if key == "success" or value is not None}


class PaginatedResponse(CamelModel, Generic[T]):
    """Standard pagination response."""
    items: List[T]
    total: int
    page: int
    limit: int
    total_pages: int
