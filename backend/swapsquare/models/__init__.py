"""ORM Models: SQLAlchemy declarative models backing the Persistent Store.

Invariants:
    - All models inherit from Base (db/base.py)
    - Domain entities are NOT mapped one-to-one; the store keeps whole collections

Design Decisions:
    - All models imported here so Base.metadata is complete before create_all
"""

from swapsquare.models.store_collection import StoreCollection  # noqa: F401
