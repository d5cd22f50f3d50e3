# routes/dependencies.py - Shared query-parameter dependencies
from typing import Optional
from fastapi import Query
from repository.pagination import MAX_PAGE_SIZE, PageRequest

def page_request(
    page: int = Query(0, ge=0, description="Zero-based page number"),
    size: int = Query(10, ge=1, le=MAX_PAGE_SIZE, description="Page size"),
    sort: Optional[str] = Query(None, description="field[,asc|desc]"),
) -> PageRequest:
    return PageRequest(page=page, size=size, sort=sort)
