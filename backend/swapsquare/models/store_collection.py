"""StoreCollection ORM: one row per Persistent Store collection.

Invariants:
    - name is the primary key and one of core.domain_types.Collection values
    - payload holds the whole collection as JSON (list for items/swaps,
      mapping for messages/profiles)
    - version increments on every write

Design Decisions:
    - JSON column over per-entity tables: the store contract is whole-collection
      get/set, and version is the hook for compare-and-swap in a shared backend
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import String, Integer, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from swapsquare.db.base import Base


class StoreCollection(Base):
    """A named collection snapshot."""
    __tablename__ = "store_collections"

    name: Mapped[str] = mapped_column(String(32), primary_key=True)
    payload: Mapped[Any] = mapped_column(JSON, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
