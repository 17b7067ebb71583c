"""Item Schemas: listing responses."""

from pydantic import BaseModel

from swapsquare.core.domain_types import ItemStatus
from swapsquare.core.entities import Item


class ItemResponse(BaseModel):
    id: str
    owner_id: str
    title: str
    category: str
    condition: str
    city: str
    description: str
    images: list[str]
    status: ItemStatus
    locked_by_swap_id: str | None = None
    created_at: int

    @classmethod
    def from_entity(cls, item: Item) -> "ItemResponse":
        return cls(
            id=item.id,
            owner_id=item.owner_id,
            title=item.title,
            category=item.category,
            condition=item.condition,
            city=item.city,
            description=item.description,
            images=list(item.images),
            status=item.status,
            locked_by_swap_id=item.locked_by_swap_id,
            created_at=item.created_at,
        )
