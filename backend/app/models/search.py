from pydantic import Field, field_validator, model_validator
from typing import Optional, List
from app.models.common import CamelModel, MAX_PAGE, MAX_PAGE_SIZE
from app.models.property import PropertyType, SortField, SortOrder, BoundingBox
from app.db.models import FACILITY_KEYS


DEFAULT_PAGE_SIZE = 12
FEATURED_LIMIT = 6
MAP_LIMIT = 100


class ListingFilters(CamelModel):
    """Validated filters for the full and public listing endpoints"""
    city: Optional[str] = None
    area: Optional[str] = None
    pin_code: Optional[str] = None
    property_type: Optional[PropertyType] = None
    min_rent: Optional[float] = Field(None, allow_inf_nan=False)
    max_rent: Optional[float] = Field(None, allow_inf_nan=False)
    facilities: List[str] = []

    # Pagination and sorting
    page: int = Field(1, ge=1, le=MAX_PAGE)
    limit: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    sort_by: SortField = SortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC

    @field_validator('city', 'area', 'pin_code', mode='before')
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator('facilities', mode='before')
    @classmethod
    def split_facilities(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator('facilities')
    @classmethod
    def validate_facilities(cls, v):
        unknown = [item for item in v if item not in FACILITY_KEYS]
        if unknown:
            raise ValueError(f"Unknown facilities: {', '.join(unknown)}")
        return v

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class MapFilters(CamelModel):
    """Filters for the map view; limit is capped at MAP_LIMIT"""
    city: Optional[str] = None
    bounds: Optional[BoundingBox] = None
    limit: int = Field(MAP_LIMIT, ge=1)

    @field_validator('city', mode='before')
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator('bounds', mode='before')
    @classmethod
    def parse_bounds(cls, v):
        if isinstance(v, str):
            return BoundingBox.split(v) if v.strip() else None
        return v

    @model_validator(mode='after')
    def cap_limit(self):
        self.limit = min(self.limit, MAP_LIMIT)
        return self
