from fastapi import APIRouter, BackgroundTasks, Depends, File, HTTPException, Query, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.orm import Session, sessionmaker
from typing import List, Optional
from app.core.auth import get_current_user
from app.core.database import get_db, get_session_factory
from app.core.exceptions import ServiceError
from app.models.common import StatusResponse, MAX_PAGE, MAX_PAGE_SIZE
from app.models.property import (
    PropertyType, SortField, SortOrder, PropertyCreate, PropertyUpdate,
    PropertyListResponse, PublicPropertyListResponse, PropertyCollection, PublicPropertyCollection,
    MapPropertyCollection, PropertyResponse, PublicPropertyResponse, PropertyMutationResponse,
    FacilitiesListResponse,
)
from app.models.search import ListingFilters, MapFilters, DEFAULT_PAGE_SIZE, MAP_LIMIT
from app.models.user import CurrentUser
from app.modules.properties.service import PropertyService
from app.modules.properties.view_counter import record_views
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

def get_property_service(db: Session = Depends(get_db)) -> PropertyService:
    return PropertyService(db)

def _build_filters(**params) -> ListingFilters:
    try:
        return ListingFilters(**params)
    except ValidationError as e:
        raise RequestValidationError(e.errors())

def listing_filters(
    city: Optional[str] = Query(None, description="Case-insensitive substring of the city"),
    area: Optional[str] = Query(None, description="Case-insensitive substring of the area"),
    pin_code: Optional[str] = Query(None, alias="pinCode", description="Exact 6-digit pin code"),
    property_type: Optional[PropertyType] = Query(None, alias="propertyType"),
    min_rent: Optional[float] = Query(None, alias="minRent", allow_inf_nan=False),
    max_rent: Optional[float] = Query(None, alias="maxRent", allow_inf_nan=False),
    facilities: Optional[str] = Query(None, description="Comma-separated facility keys"),
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    sort_by: SortField = Query(SortField.CREATED_AT, alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.DESC, alias="sortOrder"),
) -> ListingFilters:
    return _build_filters(
        city=city, area=area, pin_code=pin_code, property_type=property_type,
        min_rent=min_rent, max_rent=max_rent, facilities=facilities,
        page=page, limit=limit, sort_by=sort_by, sort_order=sort_order,
    )

def public_listing_filters(
    city: Optional[str] = Query(None),
    area: Optional[str] = Query(None),
    pin_code: Optional[str] = Query(None, alias="pinCode"),
    property_type: Optional[PropertyType] = Query(None, alias="propertyType"),
    min_rent: Optional[float] = Query(None, alias="minRent", allow_inf_nan=False),
    max_rent: Optional[float] = Query(None, alias="maxRent", allow_inf_nan=False),
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    sort_by: SortField = Query(SortField.CREATED_AT, alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.DESC, alias="sortOrder"),
) -> ListingFilters:
    return _build_filters(
        city=city, area=area, pin_code=pin_code, property_type=property_type,
        min_rent=min_rent, max_rent=max_rent,
        page=page, limit=limit, sort_by=sort_by, sort_order=sort_order,
    )

def map_filters(
    bounds: Optional[str] = Query(None, description="swLat,swLng,neLat,neLng"),
    city: Optional[str] = Query(None),
    limit: int = Query(MAP_LIMIT, ge=1),
) -> MapFilters:
    try:
        return MapFilters(bounds=bounds, city=city, limit=limit)
    except ValidationError as e:
        raise RequestValidationError(e.errors())

def _service_error(e: ServiceError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.message)

# Public endpoints

@router.get("/public", response_model=PublicPropertyListResponse)
def get_public_properties(
    background_tasks: BackgroundTasks,
    filters: ListingFilters = Depends(public_listing_filters),
    property_service: PropertyService = Depends(get_property_service),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    """
    Browse available listings without signing in.

    Only the teaser fields are returned. Every returned listing gets a view.
    """
    try:
        result = property_service.list_public_properties(filters)
        background_tasks.add_task(record_views, session_factory, [p.id for p in result.properties])
        return result

    except Exception as e:
        logger.error(f"Failed to get public properties: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error fetching properties"
        )

@router.get("/public/featured", response_model=PublicPropertyCollection)
def get_public_featured_properties(
    property_service: PropertyService = Depends(get_property_service)
):
    try:
        return property_service.list_public_featured()

    except Exception as e:
        logger.error(f"Failed to get public featured properties: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error fetching featured properties"
        )

@router.get("/public/{property_id}", response_model=PublicPropertyResponse)
def get_public_property(
    property_id: str,
    property_service: PropertyService = Depends(get_property_service)
):
    """Teaser detail of an available listing."""
    try:
        return PublicPropertyResponse(property=property_service.get_public_property(property_id))

    except ServiceError as e:
        raise _service_error(e)
    except Exception as e:
        logger.error(f"Failed to get public property {property_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error fetching property"
        )

# Authenticated listing endpoints

@router.get("", response_model=PropertyListResponse)
def get_properties(
    background_tasks: BackgroundTasks,
    filters: ListingFilters = Depends(listing_filters),
    current_user: CurrentUser = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    """
    Search available listings with filters, sorting and pagination.

    Every returned listing gets a view once the response is sent.
    """
    try:
        result = property_service.list_properties(filters, current_user)
        background_tasks.add_task(record_views, session_factory, [p.id for p in result.properties])
        return result

    except Exception as e:
        logger.error(f"Failed to get properties: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error fetching properties"
        )

@router.get("/map", response_model=MapPropertyCollection)
def get_map_properties(
    filters: MapFilters = Depends(map_filters),
    current_user: CurrentUser = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
):
    """Listings with coordinates, optionally inside a bounding box."""
    try:
        return property_service.list_map_properties(filters)

    except Exception as e:
        logger.error(f"Failed to get map properties: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error fetching map properties"
        )

@router.get("/featured", response_model=PropertyCollection)
def get_featured_properties(
    current_user: CurrentUser = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
):
    try:
        return property_service.list_featured(current_user)

    except Exception as e:
        logger.error(f"Failed to get featured properties: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error fetching featured properties"
        )

@router.get("/my-properties", response_model=PropertyCollection)
@router.get("/user/my-properties", response_model=PropertyCollection, include_in_schema=False)
def get_my_properties(
    current_user: CurrentUser = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
):
    """All of the caller's listings, listed or not."""
    try:
        return property_service.list_owner_properties(current_user)

    except Exception as e:
        logger.error(f"Failed to get properties for user {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error fetching user properties"
        )

@router.get("/facilities/list", response_model=FacilitiesListResponse)
def get_facilities(current_user: CurrentUser = Depends(get_current_user)):
    return FacilitiesListResponse(facilities=PropertyService.facilities())

@router.get("/{property_id}", response_model=PropertyResponse)
def get_property(
    property_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
):
    """Full listing detail. Owner phone/email follow the listing's contact settings."""
    try:
        return PropertyResponse(property=property_service.get_property(property_id, current_user))

    except ServiceError as e:
        raise _service_error(e)
    except Exception as e:
        logger.error(f"Failed to get property {property_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error fetching property"
        )

# Owner mutations

@router.post("", response_model=PropertyMutationResponse, status_code=status.HTTP_201_CREATED)
def create_property(
    property_data: PropertyCreate,
    current_user: CurrentUser = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
):
    """Create a listing. Only homeowners and brokers may list properties."""
    try:
        created = property_service.create_property(property_data, current_user)
        return PropertyMutationResponse(message="Property created successfully", property=created)

    except ServiceError as e:
        raise _service_error(e)
    except Exception as e:
        logger.error(f"Property creation failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error creating property"
        )

@router.put("/{property_id}", response_model=PropertyMutationResponse)
def update_property(
    property_id: str,
    property_data: PropertyUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
):
    """Partially update a listing. Images in the body are appended."""
    try:
        updated = property_service.update_property(property_id, property_data, current_user)
        return PropertyMutationResponse(message="Property updated successfully", property=updated)

    except ServiceError as e:
        raise _service_error(e)
    except Exception as e:
        logger.error(f"Failed to update property {property_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error updating property"
        )

@router.delete("/{property_id}", response_model=StatusResponse)
def delete_property(
    property_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
):
    try:
        property_service.delete_property(property_id, current_user)
        return StatusResponse(message="Property deleted successfully")

    except ServiceError as e:
        raise _service_error(e)
    except Exception as e:
        logger.error(f"Failed to delete property {property_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error deleting property"
        )

@router.post("/{property_id}/images", response_model=PropertyMutationResponse)
def upload_property_images(
    property_id: str,
    images: List[UploadFile] = File(..., description="jpeg, png or webp, up to 5MB each"),
    current_user: CurrentUser = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
):
    """Upload images and append them to the listing."""
    try:
        uploads = [(image.file, image.filename, image.content_type) for image in images]
        updated = property_service.add_images(property_id, uploads, current_user)
        return PropertyMutationResponse(message="Images uploaded successfully", property=updated)

    except ServiceError as e:
        raise _service_error(e)
    except Exception as e:
        logger.error(f"Failed to upload images for property {property_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error uploading images"
        )

def _change_availability(
    property_id: str, current_user: CurrentUser, property_service: PropertyService, available: Optional[bool]
) -> PropertyMutationResponse:
    try:
        message, updated = property_service.set_availability(property_id, current_user, available)
        return PropertyMutationResponse(message=message, property=updated)

    except ServiceError as e:
        raise _service_error(e)
    except Exception as e:
        logger.error(f"Failed to change availability of property {property_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error changing property availability"
        )

@router.patch("/{property_id}/list", response_model=PropertyMutationResponse)
def list_property(
    property_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
):
    return _change_availability(property_id, current_user, property_service, True)

@router.patch("/{property_id}/delist", response_model=PropertyMutationResponse)
def delist_property(
    property_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
):
    return _change_availability(property_id, current_user, property_service, False)

@router.patch("/{property_id}/toggle-availability", response_model=PropertyMutationResponse)
def toggle_property_availability(
    property_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    property_service: PropertyService = Depends(get_property_service)
):
    return _change_availability(property_id, current_user, property_service, None)
