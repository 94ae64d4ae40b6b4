import pytest
from app.core.auth import AuthService
from app.db.models import User


class TestUserAuthentication:
    """Test cases for registration and login endpoints"""

    def test_user_registration_success(self, client, test_db_session):
        """Test successful user registration"""
        user_data = {
            "name": "Meera Shah",
            "email": "Meera@Homes.io",
            "password": "testpassword123",
            "phone": "9123456780",
            "role": "homeowner",
        }

        response = client.post("/api/auth/register", json=user_data)

        assert response.status_code == 201
        result = response.json()

        # Check response structure
        assert result["tokenType"] == "bearer"
        assert result["accessToken"]
        assert result["expiresIn"] > 0
        assert result["user"]["email"] == "meera@homes.io"
        assert result["user"]["role"] == "homeowner"
        assert result["user"]["isActive"] is True

        # Password should not be in response
        assert "password" not in result["user"]
        assert "hashedPassword" not in result["user"]

        stored = test_db_session.query(User).one()
        assert stored.hashed_password != "testpassword123"
        assert AuthService.verify_password("testpassword123", stored.hashed_password)

    def test_registration_defaults_to_tenant(self, client):
        response = client.post(
            "/api/auth/register",
            json={"name": "Arjun", "email": "arjun@renters.io", "password": "secret12"},
        )

        assert response.status_code == 201
        assert response.json()["user"]["role"] == "tenant"

    def test_user_registration_duplicate_email(self, client, make_user):
        """Test registration with duplicate email"""
        make_user(email="taken@homes.io")

        response = client.post(
            "/api/auth/register",
            json={"name": "Someone", "email": "TAKEN@homes.io", "password": "secret12"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "User with this email already exists"

    @pytest.mark.parametrize("overrides,field", [
        ({"email": "not-an-email"}, "email"),
        ({"password": "123"}, "password"),
        ({"name": "A"}, "name"),
        ({"phone": "12345"}, "phone"),
        ({"role": "admin"}, "role"),
    ])
    def test_user_registration_invalid_fields(self, client, overrides, field):
        user_data = {"name": "Valid Name", "email": "valid@homes.io", "password": "secret12"}
        user_data.update(overrides)

        response = client.post("/api/auth/register", json=user_data)

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == field

    def test_user_login_success(self, client, make_user):
        """Test successful login returns a usable token"""
        user = make_user(email="login@homes.io", password="rightpass")

        response = client.post("/api/auth/login", json={"email": "login@homes.io", "password": "rightpass"})

        assert response.status_code == 200
        result = response.json()
        assert result["user"]["id"] == str(user.id)

        payload = AuthService.decode_access_token(result["accessToken"])
        assert payload["sub"] == str(user.id)

    def test_user_login_invalid_credentials(self, client, make_user):
        make_user(email="login@homes.io", password="rightpass")

        for credentials in (
            {"email": "login@homes.io", "password": "wrongpass"},
            {"email": "nobody@homes.io", "password": "rightpass"},
        ):
            response = client.post("/api/auth/login", json=credentials)
            assert response.status_code == 401
            assert response.json()["detail"] == "Invalid email or password"

    def test_user_login_missing_fields(self, client):
        response = client.post("/api/auth/login", json={"email": "login@homes.io"})

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "password"


class TestUserProfile:
    """Test cases for the current user endpoint"""

    def test_get_current_user(self, client, make_user, auth_headers):
        user = make_user(name="Kiran", role="broker")

        response = client.get("/api/auth/me", headers=auth_headers(user))

        assert response.status_code == 200
        result = response.json()
        assert result["id"] == str(user.id)
        assert result["name"] == "Kiran"
        assert result["role"] == "broker"

    def test_get_current_user_without_auth(self, client):
        response = client.get("/api/auth/me")

        assert response.status_code == 401

    def test_get_current_user_invalid_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer invalid_token"})

        assert response.status_code == 401

    def test_token_for_deleted_user(self, client, test_db_session, make_user, auth_headers):
        user = make_user()
        headers = auth_headers(user)
        test_db_session.delete(user)
        test_db_session.commit()

        response = client.get("/api/auth/me", headers=headers)

        assert response.status_code == 401
        assert response.json()["detail"] == "Not authorized, user not found"


class TestHealth:
    def test_health_reports_database(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "services": {"database": "healthy"}}
