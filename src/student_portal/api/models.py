"""Pydantic models for the HTTP request and response bodies."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from student_portal.domain.models import PublicUserView


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SignUpRequest(BaseModel):
    """Sign-up form payload. Missing fields are rejected by the service."""

    username: str = ""
    display_name: str = Field(
        default="",
        validation_alias=AliasChoices("displayName", "display_name", "name"),
    )
    student_id: str = Field(
        default="",
        validation_alias=AliasChoices("studentId", "student_id", "nim"),
    )
    email: str = ""
    password: str = ""
    confirm_password: str | None = Field(
        default=None,
        validation_alias=AliasChoices("confirmPassword", "confirm_password"),
    )


class SignInRequest(BaseModel):
    """Sign-in payload; the identifier is a username, email or student id."""

    identifier: str = ""
    password: str = ""


class ResetPasswordRequest(BaseModel):
    """Password reset payload."""

    email: str = ""
    new_password: str = Field(
        default="",
        validation_alias=AliasChoices("newPassword", "new_password"),
    )
    confirm_new_password: str | None = Field(
        default=None,
        validation_alias=AliasChoices("confirmNewPassword", "confirm_new_password"),
    )


class MessageResponse(BaseModel):
    """Plain message body."""

    message: str


class SignInResponse(_CamelModel):
    """Successful sign-in body."""

    message: str
    redirect_url: str


class ProfileResponse(_CamelModel):
    """Public profile of the signed-in user."""

    username: str
    display_name: str
    email: str
    student_id: str
    photo_ref: str

    @classmethod
    def from_view(cls, view: PublicUserView) -> "ProfileResponse":
        """Build the response from a session snapshot."""
        return cls(
            username=view.username,
            display_name=view.display_name,
            email=view.email,
            student_id=view.student_id,
            photo_ref=view.photo_ref,
        )


class PhotoUpdateResponse(_CamelModel):
    """Successful photo replacement body."""

    photo_ref: str
    photo_url: str
    message: str
