"""Item Routes: browse, post and delete listings.

Invariants:
    - Every route requires a signed-in user
    - POST takes multipart form fields plus 1..3 image files
    - Fixed paths (/mine) are declared before /{item_id}
"""

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status

from swapsquare.api.dependencies import get_current_user, get_marketplace
from swapsquare.core.entities import BrowseFilter, ItemDraft, UserRef
from swapsquare.schemas.item import ItemResponse
from swapsquare.services.marketplace import Marketplace

router = APIRouter(prefix="/api/v1/items", tags=["items"])


@router.get("", response_model=list[ItemResponse])
async def browse_items(
    q: str = Query("", max_length=200),
    category: str = Query("", max_length=100),
    same_city: bool = False,
    hide_own: bool = False,
    user: UserRef = Depends(get_current_user),
    market: Marketplace = Depends(get_marketplace),
):
    """Browse all listings with optional filters, newest first."""
    items = await market.catalog.browse(
        user.id,
        BrowseFilter(
            query=q, category=category, same_city=same_city, hide_own=hide_own,
        ),
    )
    return [ItemResponse.from_entity(it) for it in items]


@router.get("/mine", response_model=list[ItemResponse])
async def my_items(
    user: UserRef = Depends(get_current_user),
    market: Marketplace = Depends(get_marketplace),
):
    items = await market.catalog.list_by_owner(user.id)
    return [ItemResponse.from_entity(it) for it in items]


@router.get("/{item_id}", response_model=ItemResponse)
async def get_item(
    item_id: str,
    user: UserRef = Depends(get_current_user),
    market: Marketplace = Depends(get_marketplace),
):
    return ItemResponse.from_entity(await market.catalog.get_item(item_id))


@router.get("/{item_id}/offerable", response_model=list[ItemResponse])
async def offerable_items(
    item_id: str,
    user: UserRef = Depends(get_current_user),
    market: Marketplace = Depends(get_marketplace),
):
    """My Active items that could be offered for `item_id`."""
    items = await market.catalog.offerable_items(user.id, item_id)
    return [ItemResponse.from_entity(it) for it in items]


@router.post(
    "", response_model=ItemResponse, status_code=status.HTTP_201_CREATED,
)
async def create_item(
    title: str = Form(""),
    category: str = Form(""),
    condition: str = Form(""),
    description: str = Form(""),
    city: str | None = Form(None),
    images: list[UploadFile] = File(default=[]),
    user: UserRef = Depends(get_current_user),
    market: Marketplace = Depends(get_marketplace),
):
    # blank fields are rejected by the catalog with a field-aware message
    item = await market.catalog.create_item(
        user.id,
        ItemDraft(
            title=title, category=category, condition=condition,
            description=description, city=city,
        ),
        images,
    )
    return ItemResponse.from_entity(item)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    item_id: str,
    user: UserRef = Depends(get_current_user),
    market: Marketplace = Depends(get_marketplace),
):
    await market.catalog.delete_item(user.id, item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
