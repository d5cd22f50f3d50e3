# models/common.py - Shared response envelopes
from typing import Any, Generic, List, Optional, TypeVar
from pydantic import BaseModel
from repository.pagination import PageResult

T = TypeVar("T")

class ResponseSchema(BaseModel):
    code: str
    status: str
    message: str
    result: Optional[Any] = None

class Page(BaseModel, Generic[T]):
    content: List[T]
    page: int
    size: int
    total_elements: int
    total_pages: int

    @classmethod
    def from_result(cls, result: PageResult, item_model):
        return cls(
            content=[item_model.model_validate(item) for item in result.items],
            page=result.page,
            size=result.size,
            total_elements=result.total_elements,
            total_pages=result.total_pages,
        )
