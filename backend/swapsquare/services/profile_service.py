"""Profile Service: local profile records kept in step with the Identity Provider.

Invariants:
    - upsert_from_auth is idempotent: an existing profile keeps its name and city
    - Every signed-in user has a profile after the auth-change listener runs
    - register stores the caller's name and city, overriding the defaults the
      listener wrote during sign-up
"""

import logging

from swapsquare.core.domain_types import DEFAULT_CITY, UserId
from swapsquare.core.entities import Profile, UserRef
from swapsquare.core.errors import ValidationError
from swapsquare.core.repository_protocols import IdentityProvider
from swapsquare.services.repository import Repository

logger = logging.getLogger(__name__)

FALLBACK_NAME = "User"


def default_name(email: str) -> str:
    local = (email or "").split("@", 1)[0].strip()
    return local or FALLBACK_NAME


class ProfileService:
    """Profiles keyed by user id."""

    def __init__(
        self,
        repo: Repository,
        identity: IdentityProvider,
        default_city: str = DEFAULT_CITY,
    ):
        self._repo = repo
        self._identity = identity
        self.default_city = default_city

    async def upsert_from_auth(self, user: UserRef | None) -> None:
        """Auth-change listener: make sure a profile exists for `user`."""
        if user is None:
            return
        async with self._repo.mutation():
            existing = await self._repo.get_profile(user.id)
            if existing is None:
                profile = Profile(
                    name=default_name(user.email),
                    city=self.default_city,
                    email=user.email,
                )
                logger.info("Profile created", extra={"user_id": user.id})
            elif existing.email != user.email:
                profile = Profile(existing.name, existing.city, user.email)
            else:
                return
            await self._repo.put_profile(user.id, profile)

    async def register(
        self, name: str, city: str, email: str, password: str,
    ) -> UserRef:
        """Create an account and its profile.

        Raises:
            ValidationError: a field is blank
            AuthError: the Identity Provider refused the registration
        """
        fields = {
            "name": (name or "").strip(),
            "city": (city or "").strip(),
            "email": (email or "").strip(),
        }
        missing = [k for k, v in fields.items() if not v]
        if not password:
            missing.append("password")
        if missing:
            raise ValidationError(
                f"Please fill in all fields: {', '.join(missing)}",
                field=missing[0],
            )

        user = await self._identity.register(fields["email"], password)
        async with self._repo.mutation():
            await self._repo.put_profile(
                user.id, Profile(fields["name"], fields["city"], user.email),
            )
        return user

    async def get_profile(self, user_id: str) -> Profile | None:
        return await self._repo.get_profile(user_id)

    async def display_name(self, user_id: UserId) -> str:
        profile = await self._repo.get_profile(user_id)
        return profile.name if profile and profile.name else FALLBACK_NAME
