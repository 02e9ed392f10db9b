"""Rating API routes - thin layer delegating to the vote gate and rating store.
Follows Single Responsibility Principle - only handles HTTP concerns."""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from rating_service.api.dependencies import (
    get_existing_session_store,
    get_session_store,
    verify_admin_key,
)
from rating_service.api.v1.schemas.rating_schemas import (
    ClearResponseSchema,
    RatingListResponseSchema,
    RatingViewSchema,
    SortedIdsResponseSchema,
    VoteResponseSchema,
)
from rating_service.application.services.rating_store import RatingStore
from rating_service.application.use_cases.vote_gate import VoteGate
from rating_service.core.dependencies import (
    get_attribute_registry,
    get_rating_repository,
    get_vote_gate,
)
from rating_service.domain.repositories.attribute_registry import AttributeRegistry
from rating_service.domain.repositories.rating_repository import RatingRepository
from rating_service.domain.repositories.session_store import SessionStore
from rating_service.domain.value_objects.rating import SortDirection

router = APIRouter(tags=["ratings"])


def parse_item_ids(raw: str) -> List[int]:
    """Parse a comma separated id list such as ``"1,2,3"``."""
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise HTTPException(status_code=400, detail="item_ids must be a comma separated list of integers")


async def _rating_store(
    model_id: int,
    attribute_id: int,
    registry: AttributeRegistry,
    repository: RatingRepository,
    session_store: Optional[SessionStore] = None,
) -> RatingStore:
    config = await registry.resolve(model_id, attribute_id)
    if config is None:
        raise HTTPException(
            status_code=404,
            detail=f"Rating attribute {attribute_id} of model {model_id} not found",
        )
    return RatingStore(model_id, attribute_id, config, repository, session_store)


@router.post("/ratings/vote", response_model=VoteResponseSchema)
async def cast_vote(
    payload: Optional[Dict[str, Any]] = Body(None),
    gate: VoteGate = Depends(get_vote_gate),
    session_store: SessionStore = Depends(get_session_store),
):
    """
    Cast a vote on an item.

    A repeated vote from the same session is accepted and ignored.
    """
    result = await gate.handle(payload or {}, session_store)
    if not result.ok:
        raise HTTPException(status_code=result.status_code, detail=result.message)
    return VoteResponseSchema()


@router.get("/ratings/{model_id}/{attribute_id}", response_model=RatingListResponseSchema)
async def get_ratings(
    model_id: int,
    attribute_id: int,
    item_ids: str = Query(..., description="Comma separated item ids"),
    registry: AttributeRegistry = Depends(get_attribute_registry),
    repository: RatingRepository = Depends(get_rating_repository),
    session_store: Optional[SessionStore] = Depends(get_existing_session_store),
):
    """
    Get rating render data for a set of items.

    Items without votes are returned with zero votes and a zero mean.
    """
    store = await _rating_store(model_id, attribute_id, registry, repository, session_store)
    views = await store.render_data(parse_item_ids(item_ids))
    return RatingListResponseSchema(
        model_id=model_id,
        attribute_id=attribute_id,
        items=[RatingViewSchema(**vars(view)) for view in views.values()],
    )


@router.get("/ratings/{model_id}/{attribute_id}/sorted", response_model=SortedIdsResponseSchema)
async def sort_by_rating(
    model_id: int,
    attribute_id: int,
    item_ids: str = Query(..., description="Comma separated item ids"),
    direction: str = Query("DESC"),
    registry: AttributeRegistry = Depends(get_attribute_registry),
    repository: RatingRepository = Depends(get_rating_repository),
):
    """Order item ids by mean rating; unrated items sort to the bottom."""
    sort_direction = SortDirection.parse(direction)
    store = await _rating_store(model_id, attribute_id, registry, repository)
    if not store.config.sortable:
        raise HTTPException(status_code=400, detail="Rating attribute is not sortable")

    ordered = await store.order_by_rating(parse_item_ids(item_ids), sort_direction)
    return SortedIdsResponseSchema(direction=sort_direction.value, item_ids=ordered)


@router.delete(
    "/ratings/{model_id}/{attribute_id}",
    response_model=ClearResponseSchema,
    dependencies=[Depends(verify_admin_key)],
)
async def clear_ratings(
    model_id: int,
    attribute_id: int,
    item_ids: str = Query(..., description="Comma separated item ids"),
    registry: AttributeRegistry = Depends(get_attribute_registry),
    repository: RatingRepository = Depends(get_rating_repository),
):
    """Delete the votes of the given items (items were deleted)."""
    ids = parse_item_ids(item_ids)
    store = await _rating_store(model_id, attribute_id, registry, repository)
    await store.clear_aggregates(ids)
    return ClearResponseSchema(item_ids=ids)


@router.delete(
    "/ratings/{model_id}/{attribute_id}/all",
    response_model=ClearResponseSchema,
    dependencies=[Depends(verify_admin_key)],
)
async def destroy_ratings(
    model_id: int,
    attribute_id: int,
    registry: AttributeRegistry = Depends(get_attribute_registry),
    repository: RatingRepository = Depends(get_rating_repository),
):
    """Delete every vote of the attribute (attribute was removed)."""
    store = await _rating_store(model_id, attribute_id, registry, repository)
    await store.destroy_all()
    return ClearResponseSchema()
