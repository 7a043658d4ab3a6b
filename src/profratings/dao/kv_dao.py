"""
Data access layer over the key-value store.

Every structured record is validated on the way in and on the way out. The
aggregate professor list is the one exception: it is served as a raw string.
"""

import asyncio
import json
import logging
import math
import sys
import weakref
from typing import Iterable, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..core.errors import (
    AggregationError,
    AuthenticationError,
    NotFoundError,
    PreconditionFailedError,
    RecordValidationError,
    StateConflictError,
    WriteError,
)
from ..database.kv import StoreBindings
from ..models.schema import PendingReview, Professor, Review, ReviewStatus, User

logger = logging.getLogger(__name__)

ALL_PROFESSORS_KEY = "all"

ModelT = TypeVar("ModelT", bound=BaseModel)

# In-process serialization of add_review per professor id; entries vanish once no
# commit holds or awaits the lock
_professor_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = (
    weakref.WeakValueDictionary()
)


def round_half_away(value: float, places: int = 2) -> float:
    """Round to `places` decimals, halves away from zero, after an epsilon nudge."""
    factor = 10**places
    scaled = (abs(value) + sys.float_info.epsilon) * factor
    return math.copysign(math.floor(scaled + 0.5) / factor, value)


def running_mean(old_mean: float, count: int, new_value: float) -> float:
    return (old_mean * count + new_value) / (count + 1)


def fold_review_statistics(professor: Professor, pending: PendingReview) -> None:
    """Fold a review's sub-ratings into the professor's running means in place."""
    if professor.num_evals == 0:
        # First evaluation seeds the means with the raw values
        overall = pending.overall_rating
        material = pending.presents_material_clearly
        difficulties = pending.recognizes_student_difficulties
    else:
        n = professor.num_evals
        overall = running_mean(professor.overall_rating, n, pending.overall_rating)
        material = running_mean(
            professor.material_clear, n, pending.presents_material_clearly
        )
        difficulties = running_mean(
            professor.student_difficulties, n, pending.recognizes_student_difficulties
        )

    professor.num_evals += 1
    professor.overall_rating = round_half_away(overall)
    professor.material_clear = round_half_away(material)
    professor.student_difficulties = round_half_away(difficulties)


def _parse(model: Type[ModelT], raw: str) -> ModelT:
    return model.model_validate(json.loads(raw))


def _revalidate(record: ModelT) -> ModelT:
    # Pydantic does not validate attribute assignment, so re-run the schema
    return type(record).model_validate(record.model_dump())


def _serialize(record: BaseModel) -> str:
    return record.model_dump_json(by_alias=True)


class KVDAO:
    """Reads and writes professors, pending reviews and users."""

    def __init__(self, bindings: StoreBindings):
        self.professors_namespace = bindings.professors
        self.users_namespace = bindings.users
        self.processing_queue_namespace = bindings.processing_queue

    async def get_all_professors(self) -> str:
        # The aggregate list is too large to validate per request; served as stored
        professor_list = await self.professors_namespace.get(ALL_PROFESSORS_KEY)
        if professor_list is None:
            raise NotFoundError("Could not find any professors.")

        return professor_list

    async def put_all_professors(self, professors: Iterable[Professor]) -> int:
        listings = [
            professor.to_listing().model_dump(mode="json", by_alias=True)
            for professor in professors
        ]
        await self.professors_namespace.put(ALL_PROFESSORS_KEY, json.dumps(listings))
        logger.info(f"Rebuilt professor list with {len(listings)} entries")
        return len(listings)

    async def get_professor(self, professor_id: str) -> Professor:
        prof_string = await self.professors_namespace.get(professor_id)
        if prof_string is None:
            raise NotFoundError("Professor does not exist!")

        try:
            return _parse(Professor, prof_string)
        except (ValueError, ValidationError) as e:
            logger.error(f"Stored professor {professor_id} is malformed: {e}")
            raise RecordValidationError(f"Professor {professor_id} failed validation.")

    async def put_professor(self, professor: Professor) -> None:
        try:
            professor = _revalidate(professor)
        except ValidationError:
            raise WriteError("Error occurred adding/updating professor.")

        await self.professors_namespace.put(professor.id, _serialize(professor))

    async def get_pending_review(self, review_id: str) -> PendingReview:
        pending_string = await self.processing_queue_namespace.get(review_id)
        if pending_string is None:
            raise NotFoundError("Rating does not exist.")

        logger.info(f"Retrieved pending review {review_id}")

        try:
            return _parse(PendingReview, pending_string)
        except (ValueError, ValidationError) as e:
            logger.error(f"Stored pending review {review_id} is malformed: {e}")
            raise RecordValidationError(f"Pending review {review_id} failed validation.")

    async def add_pending_review(self, review: PendingReview) -> None:
        try:
            review = _revalidate(review)
        except ValidationError:
            raise WriteError("Error occurred queueing pending review.")

        await self.processing_queue_namespace.put(review.id, _serialize(review))

    async def add_review(self, pending_review: PendingReview) -> Professor:
        try:
            pending_review = _revalidate(pending_review)
        except ValidationError:
            raise RecordValidationError("Pending review failed validation.")

        if pending_review.status != ReviewStatus.SUCCESSFUL:
            raise PreconditionFailedError(
                "Cannot add rating to KV that has not been analyzed."
            )

        lock = _professor_locks.setdefault(pending_review.professor, asyncio.Lock())
        async with lock:
            return await self._commit_review(pending_review)

    async def _commit_review(self, pending_review: PendingReview) -> Professor:
        professor = await self.get_professor(pending_review.professor)
        new_review = Review.from_pending_review(pending_review)
        course_name = pending_review.course_name

        reviews = professor.reviews.get(course_name)
        if reviews and any(review.id == new_review.id for review in reviews):
            logger.warning(
                f"Duplicate review {new_review.id} for professor {professor.id} in {course_name}"
            )
            raise StateConflictError(
                f"Encountered collision or duplicate review for professor: "
                f"{new_review.professor} and rating: {new_review.id}"
            )

        if course_name not in professor.courses:
            professor.courses.append(course_name)

        if reviews:
            reviews.append(new_review)
        else:
            professor.reviews[course_name] = [new_review]

        fold_review_statistics(professor, pending_review)

        try:
            professor = _revalidate(professor)
        except ValidationError as e:
            logger.error(f"Professor {professor.id} invalid after aggregation: {e}")
            raise AggregationError(
                "Failed to validate professor before adding review to KV"
            )

        await self.professors_namespace.put(professor.id, _serialize(professor))
        logger.info(
            f"Committed review {new_review.id} to {professor.id} ({course_name}), "
            f"numEvals={professor.num_evals} overall={professor.overall_rating}"
        )
        return professor

    async def get_user(self, username: str) -> User:
        user_string = await self.users_namespace.get(username)
        if user_string is None:
            raise AuthenticationError("Incorrect Credentials")

        try:
            return _parse(User, user_string)
        except (ValueError, ValidationError) as e:
            logger.error(f"Stored user record is malformed: {e}")
            raise AuthenticationError("Incorrect Credentials")

    async def put_user(self, user: User) -> None:
        try:
            user = _revalidate(user)
        except ValidationError:
            raise WriteError("Error validating new user")

        await self.users_namespace.put(user.username, _serialize(user))
