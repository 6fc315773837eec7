"""Dependency container wiring for the application."""

from dataclasses import dataclass

from student_portal.adapters.json_session_repository import JsonSessionRepository
from student_portal.adapters.json_user_repository import JsonUserRepository
from student_portal.adapters.local_photo_storage import LocalPhotoStorage
from student_portal.config import Settings
from student_portal.services.auth import AdminAccount, AuthService
from student_portal.services.passwords import Argon2CredentialHasher
from student_portal.services.profile import PhotoStorage, ProfileService
from student_portal.services.sessions import SessionService
from student_portal.services.users import UserRepository


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    user_repository: UserRepository
    photo_storage: PhotoStorage
    session_service: SessionService
    auth_service: AuthService
    profile_service: ProfileService

    def admin_account(self) -> AdminAccount:
        """Return the account seeded into an empty user store."""
        return AdminAccount(
            username=self.settings.admin_username,
            display_name=self.settings.admin_display_name,
            student_id=self.settings.admin_student_id,
            email=self.settings.admin_email,
            password=self.settings.admin_password,
        )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    data_dir = resolved_settings.data_dir.resolve()
    uploads_dir = resolved_settings.uploads_dir.resolve()
    data_dir.mkdir(parents=True, exist_ok=True)
    uploads_dir.mkdir(parents=True, exist_ok=True)

    user_repository = JsonUserRepository(resolved_settings.users_path.resolve())
    session_repository = JsonSessionRepository(
        resolved_settings.sessions_path.resolve()
    )
    photo_storage = LocalPhotoStorage(uploads_dir)
    hasher = Argon2CredentialHasher(
        time_cost=resolved_settings.password_hash_time_cost,
        memory_cost=resolved_settings.password_hash_memory_cost,
        parallelism=resolved_settings.password_hash_parallelism,
    )
    session_service = SessionService(
        repository=session_repository,
        ttl_seconds=resolved_settings.session_ttl_seconds,
    )
    auth_service = AuthService(
        users=user_repository,
        sessions=session_service,
        hasher=hasher,
    )
    profile_service = ProfileService(
        auth=auth_service,
        users=user_repository,
        storage=photo_storage,
        max_photo_bytes=resolved_settings.max_photo_bytes,
    )
    return AppContainer(
        settings=resolved_settings,
        user_repository=user_repository,
        photo_storage=photo_storage,
        session_service=session_service,
        auth_service=auth_service,
        profile_service=profile_service,
    )
