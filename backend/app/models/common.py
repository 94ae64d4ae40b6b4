from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


# Upper bounds on pagination input; keeps the row offset well inside int64
MAX_PAGE = 1_000_000
MAX_PAGE_SIZE = 100


class CamelModel(BaseModel):
    """Base for API contracts: snake_case in Python, camelCase on the wire"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class FieldError(BaseModel):
    """A single field validation failure"""
    field: str
    message: str


class Pagination(CamelModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        # ceil without floats
        total_pages = -(-total // limit) if limit else 0
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_items=total,
            items_per_page=limit,
        )


class StatusResponse(CamelModel):
    message: str
