import pytest
from pydantic import ValidationError
from app.models.common import Pagination
from app.models.message import ContactPreferences, SenderContact, MessageCreate, MessageType
from app.models.property import BoundingBox, PropertyCreate, PropertyType, RentType, SortField, SortOrder
from app.models.search import ListingFilters, MapFilters, DEFAULT_PAGE_SIZE, MAP_LIMIT
from app.modules.messages.service import redact_sender_contact


class TestListingFilters:
    """Test ListingFilters parsing and validation"""

    def test_defaults(self):
        filters = ListingFilters()
        assert filters.page == 1
        assert filters.limit == DEFAULT_PAGE_SIZE
        assert filters.sort_by == SortField.CREATED_AT
        assert filters.sort_order == SortOrder.DESC
        assert filters.facilities == []
        assert filters.offset == 0

    def test_camel_case_input(self):
        filters = ListingFilters.model_validate({
            "pinCode": "411045", "propertyType": "PG", "minRent": 100, "sortBy": "rent", "page": 3, "limit": 5
        })
        assert filters.pin_code == "411045"
        assert filters.property_type == PropertyType.PG
        assert filters.min_rent == 100
        assert filters.sort_by == SortField.RENT
        assert filters.offset == 10

    def test_facilities_split_from_comma_string(self):
        filters = ListingFilters(facilities=" wifi, petFriendly ,,")
        assert filters.facilities == ["wifi", "petFriendly"]

    def test_unknown_facility(self):
        with pytest.raises(ValidationError) as exc_info:
            ListingFilters(facilities="wifi,helipad")
        assert "Unknown facilities: helipad" in str(exc_info.value)

    def test_blank_text_filters_are_ignored(self):
        filters = ListingFilters(city="  ", area="")
        assert filters.city is None
        assert filters.area is None

    @pytest.mark.parametrize("field,value", [
        ("page", 0), ("limit", 0), ("limit", 101), ("page", 10**19), ("sort_by", "price"), ("sort_order", "up"),
        ("min_rent", float("nan")), ("max_rent", float("inf")),
    ])
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            ListingFilters(**{field: value})


class TestMapFilters:
    """Test bounding box parsing and the map limit cap"""

    def test_bounds_parsed_from_string(self):
        filters = MapFilters(bounds="12.5, 77.1, 13.2, 77.9")
        assert filters.bounds == BoundingBox(sw_lat=12.5, sw_lng=77.1, ne_lat=13.2, ne_lng=77.9)

    def test_limit_is_capped(self):
        assert MapFilters(limit=500).limit == MAP_LIMIT
        assert MapFilters(limit=20).limit == 20

    def test_empty_bounds(self):
        assert MapFilters(bounds="").bounds is None

    @pytest.mark.parametrize("bounds,message", [
        ("1,2,3", "bounds must be swLat,swLng,neLat,neLng"),
        ("1,2,x,4", "bounds must contain four numbers"),
        ("10,20,5,30", "south-west corner must not exceed north-east corner"),
    ])
    def test_malformed_bounds(self, bounds, message):
        with pytest.raises(ValidationError) as exc_info:
            MapFilters(bounds=bounds)
        assert message in str(exc_info.value)


class TestPropertyCreate:
    """Test PropertyCreate validation"""

    def valid_data(self):
        return {
            "title": "  Cosy PG near campus  ",
            "description": "Single occupancy room with meals and wifi included.",
            "propertyType": "PG",
            "rent": 8000,
            "location": {"city": "Pune", "area": "Kothrud", "pinCode": "411038", "address": "7 Paud Road"},
        }

    def test_valid_property(self):
        prop = PropertyCreate.model_validate(self.valid_data())
        assert prop.title == "Cosy PG near campus"
        assert prop.rent_type == RentType.MONTHLY
        assert prop.contact_info.show_phone is True
        assert prop.contact_info.show_email is False
        assert prop.facilities.pet_friendly is False

    @pytest.mark.parametrize("pin_code", ["41103", "4110388", "abcdef", "41103 "])
    def test_pin_code_pattern(self, pin_code):
        data = self.valid_data()
        data["location"]["pinCode"] = pin_code
        with pytest.raises(ValidationError):
            PropertyCreate.model_validate(data)

    def test_title_length_after_trim(self):
        data = self.valid_data()
        data["title"] = "  abc   "
        with pytest.raises(ValidationError):
            PropertyCreate.model_validate(data)

    def test_coordinates_range(self):
        data = self.valid_data()
        data["location"]["coordinates"] = {"latitude": 91, "longitude": 10}
        with pytest.raises(ValidationError):
            PropertyCreate.model_validate(data)

    def test_image_limit(self):
        data = self.valid_data()
        data["images"] = [{"url": f"/uploads/{i}.jpg"} for i in range(11)]
        with pytest.raises(ValidationError):
            PropertyCreate.model_validate(data)


class TestMessageModels:
    """Test message input validation and contact redaction"""

    def test_defaults(self):
        message = MessageCreate(property_id="abc", subject="Hello there", content="Is parking included?")
        assert message.message_type == MessageType.INQUIRY
        assert message.contact_preferences == ContactPreferences()

    def test_subject_and_content_are_trimmed(self):
        message = MessageCreate(property_id="abc", subject="  Hello  ", content="   Is parking included?   ")
        assert message.subject == "Hello"
        assert message.content == "Is parking included?"

    def test_redaction_keeps_only_consented_channels(self):
        contact = SenderContact(name="Ravi", phone="9876543210", email="a@b.com")

        redacted = redact_sender_contact(ContactPreferences(phone=True, email=False), contact)

        assert redacted == {"name": "Ravi", "phone": "9876543210", "email": None}

    def test_redaction_drops_phone_without_consent(self):
        contact = SenderContact(phone="9876543210", email="a@b.com")

        redacted = redact_sender_contact(ContactPreferences(phone=False, email=True, whatsapp=True), contact)

        assert redacted == {"name": None, "phone": None, "email": "a@b.com"}

    def test_redaction_ignores_consent_without_value(self):
        redacted = redact_sender_contact(ContactPreferences(phone=True, email=True), SenderContact())

        assert redacted == {"name": None, "phone": None, "email": None}


class TestPagination:
    @pytest.mark.parametrize("total,limit,pages", [(0, 12, 0), (1, 12, 1), (12, 12, 1), (13, 12, 2)])
    def test_total_pages(self, total, limit, pages):
        pagination = Pagination.build(page=1, limit=limit, total=total)
        assert pagination.total_pages == pages
        assert pagination.model_dump(by_alias=True) == {
            "currentPage": 1, "totalPages": pages, "totalItems": total, "itemsPerPage": limit,
        }
