# repository/pagination.py - Offset paging and whitelisted sorting for queries
from dataclasses import dataclass
from typing import Dict, List, Optional
from sqlalchemy.orm import Query

MAX_PAGE_SIZE = 100

@dataclass
class PageRequest:
    page: int = 0
    size: int = 10
    sort: Optional[str] = None

    @property
    def offset(self) -> int:
        return self.page * self.size

@dataclass
class PageResult:
    items: List
    page: int
    size: int
    total_elements: int

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return (self.total_elements + self.size - 1) // self.size

def parse_sort(sort: Optional[str], columns: Dict[str, object], default: str, descending: bool = False):
    """Turn "field[,asc|desc]" into an ORDER BY clause, falling back to the default field."""
    field, direction = default, "desc" if descending else "asc"
    if sort:
        parts = [p.strip() for p in sort.split(",")]
        if parts[0] in columns:
            field = parts[0]
        if len(parts) > 1 and parts[1].lower() in ("asc", "desc"):
            direction = parts[1].lower()
    column = columns[field]
    return column.desc() if direction == "desc" else column.asc()

def paginate(query: Query, page_request: PageRequest, *order_by) -> PageResult:
    total = query.order_by(None).count()
    items = query.order_by(*order_by).offset(page_request.offset).limit(page_request.size).all()
    return PageResult(items=items, page=page_request.page, size=page_request.size, total_elements=total)

