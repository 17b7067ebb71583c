"""Auth Schemas: registration, login and session payloads."""

from pydantic import BaseModel, Field

from swapsquare.core.entities import Profile, UserRef


class RegisterRequest(BaseModel):
    name: str = Field(max_length=100)
    city: str = Field(max_length=100)
    email: str = Field(max_length=320)
    password: str = Field(max_length=256)


class LoginRequest(BaseModel):
    email: str = Field(max_length=320)
    password: str = Field(max_length=256)


class ProfileResponse(BaseModel):
    name: str
    city: str
    email: str

    @classmethod
    def from_entity(cls, profile: Profile) -> "ProfileResponse":
        return cls(name=profile.name, city=profile.city, email=profile.email)


class SessionResponse(BaseModel):
    """Issued on register/login; `token` goes in the Authorization header."""
    token: str
    user_id: str
    email: str
    profile: ProfileResponse | None = None

    @classmethod
    def build(
        cls, token: str, user: UserRef, profile: Profile | None,
    ) -> "SessionResponse":
        return cls(
            token=token,
            user_id=user.id,
            email=user.email,
            profile=ProfileResponse.from_entity(profile) if profile else None,
        )
