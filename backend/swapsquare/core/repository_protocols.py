"""Boundary Protocols: contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions that USE these protocols are never async themselves;
      the services orchestrate the async calls around the pure logic
    - CollectionStore offers whole-collection get/set only: no query or index
      support is assumed, all filtering happens in the core
"""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from swapsquare.core.domain_types import Collection
from swapsquare.core.entities import UserRef


AuthListener = Callable[[UserRef | None], Awaitable[None]]


class CollectionStore(Protocol):
    """Durable key-value storage of the four collections, implemented by shell."""
    async def get(self, collection: Collection) -> Any: ...
    async def set(self, collection: Collection, value: Any) -> None: ...
    async def health_check(self) -> bool: ...


class IdentityProvider(Protocol):
    """Authenticates users and yields stable ids, implemented by shell.

    Failures raise AuthError carrying the provider's message verbatim.
    """
    async def authenticate(self, email: str, password: str) -> UserRef: ...
    async def register(self, email: str, password: str) -> UserRef: ...
    async def sign_out(self, user_id: str) -> None: ...
    def on_auth_change(self, callback: AuthListener) -> Callable[[], None]: ...


class ImageUpload(Protocol):
    """An uploaded image whose contents are read asynchronously (UploadFile-compatible)."""
    filename: str | None
    content_type: str | None

    async def read(self, size: int = -1) -> bytes: ...
