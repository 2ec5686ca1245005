"""Authentication utilities for Species Hub.

Provides session-based authentication using Starlette's built-in
authentication system with starsessions-backed sessions.
"""

import logging
from collections.abc import Awaitable, Callable
from urllib.parse import urlsplit

from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from starlette.authentication import (
    AuthCredentials,
    AuthenticationBackend,
    SimpleUser,
)
from starlette.requests import HTTPConnection
from starlette.responses import RedirectResponse
from starsessions import load_session

from specieshub.accounts.models import Account
from specieshub.database.core import DatabaseService

logger = logging.getLogger(__name__)

# Password hashing context using Argon2
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def require_login_relative(
    redirect_path: str = "/",
) -> Callable[[Callable[..., Awaitable[object]]], Callable[..., Awaitable[object]]]:
    """Create authentication decorator that uses relative URLs for redirects.

    Unlike Starlette's @requires which generates absolute URLs, this decorator
    uses relative paths to avoid issues with proxies and URL parsing.

    Args:
        redirect_path: Relative path to redirect to if not authenticated

    Returns:
        Decorator function that wraps route handlers
    """
    from functools import wraps
    from urllib.parse import urlencode

    def decorator(
        func: Callable[..., Awaitable[object]],
    ) -> Callable[..., Awaitable[object]]:
        @wraps(func)
        async def wrapper(request: HTTPConnection, *args: object, **kwargs: object) -> object:
            # Runs before the handler body, so nothing is loaded for anonymous visitors
            if "authenticated" not in request.auth.scopes:
                next_qparam = urlencode({"next": str(request.url.path)})
                if request.url.query:
                    next_qparam = urlencode({"next": f"{request.url.path}?{request.url.query}"})

                redirect_url = f"{redirect_path}?{next_qparam}"
                return RedirectResponse(url=redirect_url, status_code=303)

            return await func(request, *args, **kwargs)

        return wrapper

    return decorator


# Usage: @require_login decorator on signed-in view routes
require_login = require_login_relative()


def safe_next_url(next_url: str | None, default: str = "/species") -> str:
    """Only allow relative redirect targets to prevent open redirects.

    Browsers read a backslash as a slash and drop tabs and newlines, so targets
    containing either are refused.
    """
    if not next_url or not next_url.startswith("/"):
        return default
    if "\\" in next_url or any(ord(char) < 32 or char == "\x7f" for char in next_url):
        return default
    parts = urlsplit(next_url)
    if parts.scheme or parts.netloc:
        return default
    return next_url


class AccountExistsError(Exception):
    """Raised when signing up with an email that already has an account."""


class AccountService:
    """Creates accounts and checks their credentials."""

    def __init__(self, core_database: DatabaseService) -> None:
        """Initialize account service.

        Args:
            core_database: Database holding the accounts table
        """
        self.core_database = core_database

    @staticmethod
    def normalize_email(email: str) -> str:
        """Lower-case and trim an email address for storage and lookup."""
        return email.strip().lower()

    async def get_account(self, account_id: str) -> Account | None:
        """Load an account by id."""
        async with self.core_database.get_async_db() as session:
            return await session.get(Account, account_id)

    async def get_account_by_email(self, email: str) -> Account | None:
        """Load an account by email address."""
        email = self.normalize_email(email)
        async with self.core_database.get_async_db() as session:
            result = await session.execute(
                select(Account).where(Account.email == email)  # type: ignore[arg-type]
            )
            return result.scalar_one_or_none()

    async def register(
        self, email: str, password: str, display_name: str | None = None
    ) -> Account:
        """Hash the password and store a new account.

        Raises:
            AccountExistsError: If the email is already registered
        """
        email = self.normalize_email(email)
        account = Account(
            email=email,
            display_name=(display_name or "").strip() or None,
            password_hash=pwd_context.hash(password),
        )
        async with self.core_database.get_async_db() as session:
            session.add(account)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise AccountExistsError(f"An account for {email} already exists.") from e
            await session.refresh(account)

        logger.info("Account %s registered", account.id)
        return account

    async def authenticate(self, email: str, password: str) -> Account | None:
        """Return the account if the credentials match, None otherwise."""
        account = await self.get_account_by_email(email)
        if account is None or not self.verify_password(password, account.password_hash):
            logger.info("Failed sign-in attempt for %s", self.normalize_email(email))
            return None
        return account

    def verify_password(self, password: str, password_hash: str) -> bool:
        """Verify password against hash.

        Args:
            password: Plain text password to verify
            password_hash: Argon2 hash to verify against

        Returns:
            True if password matches, False otherwise
        """
        return pwd_context.verify(password, password_hash)


class SessionUser(SimpleUser):
    """Signed-in account as seen by request handlers."""

    def __init__(self, user_id: str, email: str) -> None:
        super().__init__(email)
        self.user_id = user_id

    @property
    def identity(self) -> str:
        return self.user_id


class SessionAuthBackend(AuthenticationBackend):
    """Session-based authentication backend for Starlette.

    Checks for an account id in the session and returns appropriate credentials.
    """

    async def authenticate(
        self, conn: HTTPConnection
    ) -> tuple[AuthCredentials, SessionUser] | None:
        """Authenticate request based on session data.

        Called by AuthenticationMiddleware on every request. Explicitly loads
        session from starsessions middleware before accessing it.

        Args:
            conn: HTTP connection (request or WebSocket)

        Returns:
            Tuple of (AuthCredentials, SessionUser) if authenticated,
            None if not authenticated
        """
        await load_session(conn)

        user_id = conn.session.get("user_id")
        if not user_id:
            return None

        # The scope is checked by @require_login
        return AuthCredentials(["authenticated"]), SessionUser(
            user_id, conn.session.get("email", "")
        )
