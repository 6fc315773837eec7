"""FastAPI application factory."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, suppress

from fastapi import Depends, FastAPI, File, Request, Response, UploadFile, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles

from student_portal.api.models import (
    MessageResponse,
    PhotoUpdateResponse,
    ProfileResponse,
    ResetPasswordRequest,
    SignInRequest,
    SignInResponse,
    SignUpRequest,
)
from student_portal.app_logging import configure_logging
from student_portal.config import Settings
from student_portal.containers import AppContainer
from student_portal.domain.errors import PortalError, StorageError, ValidationError
from student_portal.services.sessions import SessionService

logger = logging.getLogger(__name__)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    settings = container.settings
    configure_logging(settings.log_level.upper())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        await state_container.auth_service.ensure_default_admin(
            state_container.admin_account()
        )
        reaper = asyncio.create_task(
            _reap_sessions(
                state_container.session_service,
                state_container.settings.session_reap_interval_seconds,
            )
        )
        yield
        reaper.cancel()
        with suppress(asyncio.CancelledError):
            await reaper

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.mount(
        "/uploads",
        StaticFiles(directory=str(settings.uploads_dir.resolve())),
        name="uploads",
    )

    @app.exception_handler(PortalError)
    async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                "Request failed",
                exc_info=exc,
                extra={"path": request.url.path},
            )
        return JSONResponse(
            status_code=exc.status_code, content={"message": exc.message}
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": ValidationError.default_message},
        )

    def session_token(request: Request) -> str | None:
        return request.cookies.get(settings.session_cookie_name)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/signup", status_code=status.HTTP_201_CREATED)
    async def signup(payload: SignUpRequest, request: Request) -> MessageResponse:
        """Register a new account."""
        state_container: AppContainer = request.app.state.container
        message = await state_container.auth_service.signup(
            username=payload.username,
            display_name=payload.display_name,
            student_id=payload.student_id,
            email=payload.email,
            password=payload.password,
            confirm_password=payload.confirm_password,
        )
        return MessageResponse(message=message)

    @app.post("/signin")
    async def signin(
        payload: SignInRequest,
        request: Request,
        response: Response,
        token: str | None = Depends(session_token),
    ) -> SignInResponse:
        """Verify credentials and set the session cookie."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.auth_service.signin(
            payload.identifier, payload.password, previous_token=token
        )
        response.set_cookie(
            settings.session_cookie_name,
            result.token,
            **_cookie_settings(state_container.settings),
        )
        return SignInResponse(
            message="Sign-in successful", redirect_url=result.redirect_url
        )

    @app.get("/profile-data")
    async def profile_data(
        request: Request, token: str | None = Depends(session_token)
    ) -> ProfileResponse:
        """Return the signed-in user's profile."""
        state_container: AppContainer = request.app.state.container
        view = await state_container.profile_service.get_profile(token)
        return ProfileResponse.from_view(view)

    @app.post("/update-photo")
    async def update_photo(
        request: Request,
        photo: UploadFile | None = File(default=None),
        token: str | None = Depends(session_token),
    ) -> PhotoUpdateResponse:
        """Replace the signed-in user's profile photo."""
        state_container: AppContainer = request.app.state.container
        profile_service = state_container.profile_service
        content: bytes | None = None
        if photo is not None:
            # One byte past the ceiling is enough to reject oversized uploads.
            content = await photo.read(profile_service.max_photo_bytes + 1)
        update = await profile_service.update_photo(
            token,
            content,
            photo.content_type if photo else None,
            photo.filename if photo else None,
        )
        return PhotoUpdateResponse(
            photo_ref=update.photo_ref,
            photo_url=update.photo_url,
            message="Photo updated successfully",
        )

    @app.post("/reset-password")
    async def reset_password(
        payload: ResetPasswordRequest, request: Request
    ) -> MessageResponse:
        """Overwrite the password of the account registered with the email."""
        state_container: AppContainer = request.app.state.container
        message = await state_container.auth_service.reset_password(
            payload.email,
            payload.new_password,
            payload.confirm_new_password,
        )
        return MessageResponse(message=message)

    @app.get("/logout")
    async def logout(
        request: Request, token: str | None = Depends(session_token)
    ) -> RedirectResponse:
        """Destroy the session and send the browser back to the sign-in page."""
        state_container: AppContainer = request.app.state.container
        await state_container.auth_service.signout(token)
        response = RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)
        response.delete_cookie(settings.session_cookie_name, path="/")
        return response

    return app


def _cookie_settings(settings: Settings) -> dict[str, object]:
    """Return attributes for the session cookie."""
    return {
        "max_age": settings.session_ttl_seconds,
        "path": "/",
        "httponly": True,
        "samesite": "lax",
        "secure": settings.cookie_secure,
    }


async def _reap_sessions(session_service: SessionService, interval: int) -> None:
    """Periodically delete expired sessions."""
    while True:
        try:
            await asyncio.to_thread(session_service.reap_expired)
        except StorageError:
            logger.exception("Failed to reap expired sessions")
        await asyncio.sleep(interval)
