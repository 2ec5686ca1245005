"""Tests for authentication utilities."""

from unittest.mock import AsyncMock, MagicMock, create_autospec, patch

import pytest
from starlette.authentication import AuthCredentials
from starlette.datastructures import URL
from starlette.requests import HTTPConnection, Request
from starlette.responses import RedirectResponse

from specieshub.utils.auth import (
    AccountExistsError,
    SessionAuthBackend,
    SessionUser,
    pwd_context,
    require_login_relative,
    safe_next_url,
)


class TestPwdContext:
    """Test password hashing context."""

    def test_hash_and_verify(self):
        """Should hash password and verify correctly."""
        password = "test_password_123"
        hashed = pwd_context.hash(password)

        assert hashed != password
        assert hashed.startswith("$argon2")
        assert pwd_context.verify(password, hashed)
        assert not pwd_context.verify("wrong_password", hashed)


class TestAccountService:
    """Test AccountService against a temp database."""

    async def test_register_and_authenticate(self, account_service):
        """Should store a hashed password and accept the right credentials."""
        account = await account_service.register("Someone@Example.com ", "s3cret-pass", " Sam ")

        assert account.email == "someone@example.com"
        assert account.display_name == "Sam"
        assert account.password_hash != "s3cret-pass"

        authenticated = await account_service.authenticate("someone@example.com", "s3cret-pass")
        assert authenticated is not None
        assert authenticated.id == account.id

    async def test_wrong_password(self, account_service):
        """Should return None for a wrong password."""
        await account_service.register("someone@example.com", "s3cret-pass")

        assert await account_service.authenticate("someone@example.com", "nope") is None

    async def test_unknown_email(self, account_service):
        """Should return None for an email with no account."""
        assert await account_service.authenticate("nobody@example.com", "s3cret-pass") is None

    async def test_duplicate_email(self, account_service):
        """Should raise AccountExistsError for an already registered email."""
        await account_service.register("someone@example.com", "s3cret-pass")

        with pytest.raises(AccountExistsError):
            await account_service.register("SOMEONE@example.com", "other-pass")

    async def test_get_account(self, account_service):
        """Should load an account by id."""
        account = await account_service.register("someone@example.com", "s3cret-pass")

        loaded = await account_service.get_account(account.id)

        assert loaded.email == "someone@example.com"
        assert loaded.get_display_name() == "someone@example.com"


class TestSafeNextUrl:
    """Test the open-redirect guard."""

    @pytest.mark.parametrize(
        "next_url,expected",
        [
            ("/species/3/edit", "/species/3/edit"),
            ("/species-speed?x=1", "/species-speed?x=1"),
            (None, "/species"),
            ("", "/species"),
            ("https://evil.example.com/", "/species"),
            ("//evil.example.com/", "/species"),
            ("/\\evil.example", "/species"),
            ("/\\/evil.example", "/species"),
            ("/\t/evil.example", "/species"),
            ("/\n/evil.example", "/species"),
            ("species", "/species"),
        ],
    )
    def test_only_relative_paths(self, next_url, expected):
        """Should only accept relative paths on this site."""
        assert safe_next_url(next_url) == expected


class TestRequireLoginRelative:
    """Test require_login_relative decorator."""

    @pytest.fixture
    def mock_request(self):
        """Create a mock request with auth."""
        request = create_autospec(Request, instance=True)
        request.auth = MagicMock(spec=AuthCredentials)
        request.url = create_autospec(URL, instance=True)
        request.url.path = "/species-speed"
        request.url.query = ""
        return request

    async def test_allows_authenticated_request(self, mock_request):
        """Should call the handler when the user is authenticated."""
        mock_request.auth.scopes = ["authenticated"]

        @require_login_relative()
        async def protected_route(request):
            return {"status": "ok"}

        assert await protected_route(mock_request) == {"status": "ok"}

    async def test_redirects_before_handler_runs(self, mock_request):
        """Should redirect to the landing page without running the handler."""
        mock_request.auth.scopes = []
        handler_body = AsyncMock()

        @require_login_relative()
        async def protected_route(request):
            await handler_body()

        result = await protected_route(mock_request)

        assert isinstance(result, RedirectResponse)
        assert result.status_code == 303
        assert result.headers["location"] == "/?next=%2Fspecies-speed"
        handler_body.assert_not_called()

    async def test_preserves_query_string_in_redirect(self, mock_request):
        """Should preserve query string when redirecting."""
        mock_request.auth.scopes = []
        mock_request.url.query = "page=2"

        @require_login_relative(redirect_path="/login")
        async def protected_route(request):
            return {"status": "ok"}

        result = await protected_route(mock_request)

        assert result.headers["location"] == "/login?next=%2Fspecies-speed%3Fpage%3D2"


class TestSessionAuthBackend:
    """Test SessionAuthBackend class."""

    @pytest.fixture
    def auth_backend(self):
        """Create SessionAuthBackend instance."""
        return SessionAuthBackend()

    async def test_authenticate_returns_none_without_session(self, auth_backend):
        """Should return None when no account id is in the session."""
        conn = create_autospec(HTTPConnection, instance=True)
        conn.session = {}

        with patch("specieshub.utils.auth.load_session", new_callable=AsyncMock) as mock_load:
            result = await auth_backend.authenticate(conn)

        mock_load.assert_called_once_with(conn)
        assert result is None

    async def test_authenticate_returns_credentials_with_session(self, auth_backend):
        """Should return credentials and the session user when signed in."""
        conn = create_autospec(HTTPConnection, instance=True)
        conn.session = {"user_id": "account-1", "email": "someone@example.com"}

        with patch("specieshub.utils.auth.load_session", new_callable=AsyncMock):
            credentials, user = await auth_backend.authenticate(conn)

        assert "authenticated" in credentials.scopes
        assert isinstance(user, SessionUser)
        assert user.user_id == "account-1"
        assert user.identity == "account-1"
        assert user.display_name == "someone@example.com"
        assert user.is_authenticated
