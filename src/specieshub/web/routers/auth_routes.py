"""Authentication routes for the landing page, sign-up, sign-in and sign-out."""

import logging
from typing import Annotated

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starsessions import load_session
from starsessions.session import regenerate_session_id

from specieshub.accounts.models import Account
from specieshub.config import SpeciesHubConfig
from specieshub.utils.auth import AccountExistsError, AccountService, safe_next_url
from specieshub.utils.notifications import Notification, push_notification
from specieshub.web.core.container import Container
from specieshub.web.models.template_contexts import BaseTemplateContext

logger = logging.getLogger(__name__)

router = APIRouter()

MIN_PASSWORD_LENGTH = 8


def _sign_in(request: Request, account: Account) -> None:
    """Bind the session to ``account`` under a fresh session id."""
    # Regenerate session ID to prevent session fixation attacks
    regenerate_session_id(request)
    request.session["user_id"] = account.id
    request.session["email"] = account.email


def _auth_page(
    request: Request,
    templates: Jinja2Templates,
    config: SpeciesHubConfig,
    template_name: str,
    page_name: str,
    *,
    error: str | None = None,
    email: str = "",
    display_name: str = "",
    status_code: int = 200,
) -> HTMLResponse:
    context = {
        **BaseTemplateContext.for_request(request, config, page_name, active_page="login"),
        "error": error,
        "email": email,
        "display_name": display_name,
        "next_url": safe_next_url(request.query_params.get("next")),
    }
    return templates.TemplateResponse(request, template_name, context, status_code=status_code)


@router.get("/", response_class=HTMLResponse)
@inject
async def landing_page(
    request: Request,
    templates: Annotated[Jinja2Templates, Depends(Provide[Container.templates])],
    config: Annotated[SpeciesHubConfig, Depends(Provide[Container.config])],
) -> HTMLResponse:
    """Render the landing page with links to sign in or browse the catalog."""
    context = {
        **BaseTemplateContext.for_request(request, config, active_page="home"),
        "next_url": safe_next_url(request.query_params.get("next")),
    }
    return templates.TemplateResponse(request, "index.html.j2", context)


@router.get("/login", response_class=HTMLResponse, name="login")
@inject
async def login_page(
    request: Request,
    templates: Annotated[Jinja2Templates, Depends(Provide[Container.templates])],
    config: Annotated[SpeciesHubConfig, Depends(Provide[Container.config])],
) -> HTMLResponse:
    """Show login page."""
    return _auth_page(request, templates, config, "auth/login.html.j2", "Sign in")


@router.post("/login", response_model=None)
@inject
async def login(
    request: Request,
    templates: Annotated[Jinja2Templates, Depends(Provide[Container.templates])],
    config: Annotated[SpeciesHubConfig, Depends(Provide[Container.config])],
    account_service: Annotated[AccountService, Depends(Provide[Container.account_service])],
    email: str = Form(...),
    password: str = Form(...),
) -> HTMLResponse | RedirectResponse:
    """Handle login form submission.

    Verifies credentials and creates session on success. Returns to login
    page with error on failure.
    """
    account = await account_service.authenticate(email, password)
    if account is None:
        return _auth_page(
            request,
            templates,
            config,
            "auth/login.html.j2",
            "Sign in",
            error="Invalid email or password.",
            email=email,
            status_code=401,
        )

    _sign_in(request, account)
    logger.info("Account %s signed in", account.id)

    # Only relative URLs are accepted as redirect targets
    return RedirectResponse(
        url=safe_next_url(request.query_params.get("next")), status_code=303
    )


@router.get("/signup", response_class=HTMLResponse)
@inject
async def signup_page(
    request: Request,
    templates: Annotated[Jinja2Templates, Depends(Provide[Container.templates])],
    config: Annotated[SpeciesHubConfig, Depends(Provide[Container.config])],
) -> HTMLResponse:
    """Show sign-up page."""
    return _auth_page(request, templates, config, "auth/signup.html.j2", "Create an account")


@router.post("/signup", response_model=None)
@inject
async def signup(
    request: Request,
    templates: Annotated[Jinja2Templates, Depends(Provide[Container.templates])],
    config: Annotated[SpeciesHubConfig, Depends(Provide[Container.config])],
    account_service: Annotated[AccountService, Depends(Provide[Container.account_service])],
    email: str = Form(...),
    password: str = Form(...),
    display_name: str = Form(""),
) -> HTMLResponse | RedirectResponse:
    """Create an account and sign it in.

    Re-renders the form with an error when the email is malformed or taken,
    or when the password is too short.
    """
    error = None
    if "@" not in email.strip():
        error = "Please enter a valid email address."
    elif len(password) < MIN_PASSWORD_LENGTH:
        error = f"Password must be at least {MIN_PASSWORD_LENGTH} characters."

    account = None
    if error is None:
        try:
            account = await account_service.register(email, password, display_name)
        except AccountExistsError:
            error = "An account with this email already exists."

    if account is None:
        return _auth_page(
            request,
            templates,
            config,
            "auth/signup.html.j2",
            "Create an account",
            error=error,
            email=email,
            display_name=display_name,
            status_code=400,
        )

    _sign_in(request, account)
    push_notification(
        request,
        Notification("Welcome!", f"Signed in as {account.get_display_name()}."),
    )
    return RedirectResponse(
        url=safe_next_url(request.query_params.get("next")), status_code=303
    )


@router.get("/logout")
async def logout(request: Request) -> RedirectResponse:
    """Handle logout.

    Clears session and redirects to the landing page.
    """
    # Load session before accessing it
    await load_session(request)
    request.session.clear()
    return RedirectResponse(url="/", status_code=303)
