from typing import Any, List
from sqlalchemy import Select, and_, func, select
from app.db.models import Property, FACILITY_COLUMNS
from app.models.property import SortField, SortOrder
from app.models.search import ListingFilters, MapFilters, FEATURED_LIMIT
import logging

logger = logging.getLogger(__name__)


def _contains(value: str) -> str:
    """LIKE pattern for a case-insensitive substring match"""
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class PropertyQueryBuilder:
    """Builds SQLAlchemy selects for the listing, map and featured views"""

    SORT_COLUMNS = {
        SortField.RENT: Property.rent,
        SortField.CREATED_AT: Property.created_at,
        SortField.VIEWS: Property.views,
    }

    def build_conditions(self, filters: ListingFilters) -> List[Any]:
        """WHERE clauses shared by the page query and its count"""

        conditions = [Property.is_available.is_(True)]

        self._add_location_filters(conditions, filters)
        self._add_basic_filters(conditions, filters)
        self._add_facility_filters(conditions, filters)

        return conditions

    def build_listing_query(self, filters: ListingFilters) -> Select:
        """Page of available listings matching the filters"""

        query = select(Property).where(and_(*self.build_conditions(filters)))
        query = self._add_sorting(query, filters)
        query = query.offset(filters.offset).limit(filters.limit)

        logger.debug(f"Built listing query: {query}")
        return query

    def build_count_query(self, filters: ListingFilters) -> Select:
        return select(func.count(Property.id)).where(and_(*self.build_conditions(filters)))

    def build_map_query(self, filters: MapFilters) -> Select:
        """Available, map-visible listings that have both coordinates"""

        conditions = [
            Property.is_available.is_(True),
            Property.show_on_map.is_(True),
            Property.latitude.is_not(None),
            Property.longitude.is_not(None),
        ]

        if filters.city:
            conditions.append(Property.city.ilike(_contains(filters.city), escape="\\"))

        # Within box: sw <= point <= ne on both axes
        if filters.bounds:
            box = filters.bounds
            conditions.extend([
                Property.latitude.between(box.sw_lat, box.ne_lat),
                Property.longitude.between(box.sw_lng, box.ne_lng),
            ])

        return (
            select(Property)
            .where(and_(*conditions))
            .order_by(Property.created_at.desc(), Property.id)
            .limit(filters.limit)
        )

    def build_featured_query(self, limit: int = FEATURED_LIMIT) -> Select:
        """Verified, available listings ranked by views then recency"""

        return (
            select(Property)
            .where(Property.is_available.is_(True), Property.is_verified.is_(True))
            .order_by(Property.views.desc(), Property.created_at.desc(), Property.id)
            .limit(limit)
        )

    def build_owner_query(self, owner_id: Any) -> Select:
        """All of an owner's listings regardless of availability"""

        return (
            select(Property)
            .where(Property.owner_id == owner_id)
            .order_by(Property.created_at.desc(), Property.id)
        )

    def _add_location_filters(self, conditions: List[Any], filters: ListingFilters):
        if filters.city:
            conditions.append(Property.city.ilike(_contains(filters.city), escape="\\"))

        if filters.area:
            conditions.append(Property.area.ilike(_contains(filters.area), escape="\\"))

        if filters.pin_code:
            conditions.append(Property.pin_code == filters.pin_code)

    def _add_basic_filters(self, conditions: List[Any], filters: ListingFilters):
        if filters.property_type:
            conditions.append(Property.property_type == filters.property_type.value)

        # Closed rent range
        if filters.min_rent is not None:
            conditions.append(Property.rent >= filters.min_rent)
        if filters.max_rent is not None:
            conditions.append(Property.rent <= filters.max_rent)

    def _add_facility_filters(self, conditions: List[Any], filters: ListingFilters):
        for facility in filters.facilities:
            column = getattr(Property, FACILITY_COLUMNS[facility])
            conditions.append(column.is_(True))

    def _add_sorting(self, query: Select, filters: ListingFilters) -> Select:
        column = self.SORT_COLUMNS[filters.sort_by]

        if filters.sort_order == SortOrder.ASC:
            return query.order_by(column.asc(), Property.id.asc())
        return query.order_by(column.desc(), Property.id.desc())
