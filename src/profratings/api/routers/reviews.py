import logging

from fastapi import APIRouter, Depends, HTTPException

from ...core.errors import ProfRatingsError
from ...dao.kv_dao import KVDAO
from ...models.schema import PendingReview, Professor
from ..dependencies import get_dao

logger = logging.getLogger(__name__)

router: APIRouter = APIRouter(prefix="/pending-reviews", tags=["Reviews"])


@router.post(
    "",
    status_code=201,
    summary="/pending-reviews",
    description="Queues a submitted review until analysis marks it successful.",
)
async def add_pending_review(review: PendingReview, dao: KVDAO = Depends(get_dao)):
    try:
        await dao.add_pending_review(review)
    except ProfRatingsError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    return {"id": review.id, "status": review.status.value}


@router.get(
    "/{review_id}",
    response_model=PendingReview,
    responses={404: {"description": "Pending review not found"}},
    summary="/pending-reviews/{review_id}",
)
async def get_pending_review(review_id: str, dao: KVDAO = Depends(get_dao)):
    try:
        return await dao.get_pending_review(review_id)
    except ProfRatingsError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/{review_id}/commit",
    response_model=Professor,
    responses={
        404: {"description": "Pending review or professor not found"},
        409: {"description": "Review already exists for this course"},
        412: {"description": "Review has not been analyzed successfully"},
    },
    summary="/pending-reviews/{review_id}/commit",
    description=(
        "Promotes a successfully analyzed pending review onto its professor and "
        "folds its ratings into the professor's running averages."
    ),
)
async def commit_pending_review(review_id: str, dao: KVDAO = Depends(get_dao)):
    try:
        pending = await dao.get_pending_review(review_id)
        return await dao.add_review(pending)
    except ProfRatingsError as e:
        logger.warning(f"Commit of pending review {review_id} failed: {e.message}")
        raise HTTPException(status_code=e.status_code, detail=e.message)
