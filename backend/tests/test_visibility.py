import pytest
from datetime import datetime, timezone
import uuid
from app.db.models import Property, User
from app.models.property import PropertyView, PublicPropertyView
from app.models.user import CurrentUser, UserRole
from app.modules.properties.visibility import ViewerContext, project, to_full_view, to_map_view


@pytest.fixture
def owner():
    return User(
        id=uuid.uuid4(), name="Nisha", email="nisha@homes.io", phone="9000000002",
        role="homeowner", hashed_password="x", is_active=True,
    )


@pytest.fixture
def record(owner):
    now = datetime(2025, 3, 1, tzinfo=timezone.utc)
    return Property(
        id=uuid.uuid4(), owner_id=owner.id, owner=owner,
        title="Garden house", description="Independent house with a private garden.",
        property_type="house", rent=30000, rent_type="monthly",
        city="Mysore", area="Gokulam", pin_code="570002", address="3 Temple Road",
        latitude=None, longitude=None,
        wifi=True, parking=False, ac=False, kitchen=True, laundry=False, security=False,
        gym=False, pool=False, garden=True, balcony=False, furnished=False, pet_friendly=True,
        bedrooms=3, bathrooms=2, floor_area=1800, floor=0, total_floors=2,
        images=[{"url": "/uploads/house.jpg", "caption": "front"}],
        is_available=True, is_verified=True, show_on_map=True, views=7,
        show_phone=False, show_email=True,
        created_at=now, updated_at=now,
    )


def viewer_for(user_id):
    return ViewerContext.for_user(CurrentUser(id=str(user_id), role=UserRole.TENANT))


class TestViewerContext:
    def test_anonymous(self, record):
        viewer = ViewerContext.anonymous()
        assert viewer.is_authenticated is False
        assert viewer.owns(record) is False

    def test_owner(self, record, owner):
        assert viewer_for(owner.id).owns(record) is True
        assert viewer_for(uuid.uuid4()).owns(record) is False


class TestProjection:
    """Test that each caller tier gets the right fields"""

    def test_anonymous_gets_teaser(self, record):
        view = project(record, ViewerContext.anonymous())

        assert isinstance(view, PublicPropertyView)
        dumped = view.model_dump(by_alias=True)
        assert set(dumped) == {"id", "title", "propertyType", "location", "images", "owner", "views", "createdAt"}
        assert dumped["owner"] == {"name": "Nisha", "role": "homeowner"}

    def test_authenticated_non_owner_contact_is_gated(self, record):
        view = project(record, viewer_for(uuid.uuid4()))

        assert isinstance(view, PropertyView)
        assert view.owner.phone is None
        assert view.owner.email == "nisha@homes.io"
        assert view.is_owner is False
        assert view.facilities.pet_friendly is True
        assert view.property_details.area == 1800

    def test_owner_sees_everything(self, record, owner):
        view = to_full_view(record, viewer_for(owner.id))

        assert view.is_owner is True
        assert view.owner.phone == "9000000002"
        assert view.owner.email == "nisha@homes.io"
        assert view.location.coordinates is None
        assert view.full_address == "3 Temple Road, Gokulam, Mysore - 570002"

    def test_map_view(self, record):
        record.latitude, record.longitude = 12.3, 76.6

        view = to_map_view(record)

        assert view.location.coordinates.latitude == 12.3
        assert view.rent == 30000
        assert view.images[0].caption == "front"
