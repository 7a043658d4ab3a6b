"""Tests for the key-value data access layer."""

import asyncio
import json

import pytest

from conftest import make_pending, make_professor, make_review
from profratings.dao import kv_dao
from profratings.core.errors import (
    AggregationError,
    AuthenticationError,
    NotFoundError,
    PreconditionFailedError,
    RecordValidationError,
    StateConflictError,
    WriteError,
)
from profratings.core.security import hash_password
from profratings.dao.kv_dao import ALL_PROFESSORS_KEY, round_half_away
from profratings.models.schema import ReviewStatus, User


@pytest.mark.parametrize(
    "value, expected",
    [
        (1.005, 1.01),
        (0.125, 0.13),
        (2.675, 2.68),
        (4.445, 4.45),
        (3.335, 3.34),
        (3.625, 3.63),
        (-0.125, -0.13),
        (13 / 3, 4.33),
        (2.0, 2.0),
        (0.0, 0.0),
    ],
)
def test_round_half_away(value, expected):
    assert round_half_away(value) == expected


class TestProfessors:
    @pytest.mark.asyncio
    async def test_get_missing_professor(self, dao):
        with pytest.raises(NotFoundError) as exc_info:
            await dao.get_professor("nope")
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_get_malformed_json(self, dao, bindings):
        await bindings.professors.put("p1", "{not json")
        with pytest.raises(RecordValidationError):
            await dao.get_professor("p1")

    @pytest.mark.asyncio
    async def test_get_record_failing_schema(self, dao, bindings):
        await bindings.professors.put("p1", json.dumps({"id": "p1", "numEvals": -3}))
        with pytest.raises(RecordValidationError) as exc_info:
            await dao.get_professor("p1")
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_put_then_get_round_trip(self, dao, professor):
        await dao.put_professor(professor)
        loaded = await dao.get_professor("p1")
        assert loaded == professor

    @pytest.mark.asyncio
    async def test_stored_json_uses_camel_case(self, dao, bindings, professor):
        await dao.put_professor(professor)
        stored = json.loads(bindings.professors.data["p1"])
        assert stored["numEvals"] == 2
        assert stored["firstName"] == "Ada"
        assert "CSC 101" in stored["reviews"]

    @pytest.mark.asyncio
    async def test_put_invalid_professor_raises_write_error(self, dao, bindings, professor):
        professor.overall_rating = 9.5
        with pytest.raises(WriteError) as exc_info:
            await dao.put_professor(professor)
        assert exc_info.value.status_code == 500
        assert "p1" not in bindings.professors.data


class TestAllProfessors:
    @pytest.mark.asyncio
    async def test_missing_list(self, dao):
        with pytest.raises(NotFoundError):
            await dao.get_all_professors()

    @pytest.mark.asyncio
    async def test_raw_passthrough_is_not_validated(self, dao, bindings):
        await bindings.professors.put(ALL_PROFESSORS_KEY, '[{"anything": true}]')
        assert await dao.get_all_professors() == '[{"anything": true}]'

    @pytest.mark.asyncio
    async def test_put_all_professors_strips_reviews(self, dao, professor):
        written = await dao.put_all_professors([professor])
        assert written == 1

        listing = json.loads(await dao.get_all_professors())
        assert listing[0]["id"] == "p1"
        assert listing[0]["courses"] == ["CSC 101"]
        assert "reviews" not in listing[0]


class TestPendingReviews:
    @pytest.mark.asyncio
    async def test_add_and_get(self, dao):
        pending = make_pending(status=ReviewStatus.QUEUED)
        await dao.add_pending_review(pending)
        assert await dao.get_pending_review("r3") == pending

    @pytest.mark.asyncio
    async def test_get_missing(self, dao):
        with pytest.raises(NotFoundError):
            await dao.get_pending_review("missing")

    @pytest.mark.asyncio
    async def test_get_malformed(self, dao, bindings):
        await bindings.processing_queue.put("r3", json.dumps({"id": "r3"}))
        with pytest.raises(RecordValidationError):
            await dao.get_pending_review("r3")

    @pytest.mark.asyncio
    async def test_add_invalid(self, dao, bindings):
        pending = make_pending()
        pending.course_num = 42
        with pytest.raises(WriteError):
            await dao.add_pending_review(pending)
        assert bindings.processing_queue.data == {}


class TestAddReview:
    @pytest.mark.asyncio
    async def test_running_means_for_existing_course(self, dao, professor):
        await dao.put_professor(professor)

        updated = await dao.add_review(make_pending())

        assert updated.num_evals == 3
        assert updated.overall_rating == 4.33
        assert updated.material_clear == 3.33
        assert updated.student_difficulties == 2.67
        assert [r.id for r in updated.reviews["CSC 101"]] == ["r1", "r2", "r3"]

        stored = await dao.get_professor("p1")
        assert stored == updated

    @pytest.mark.asyncio
    async def test_new_course_is_appended_and_folded(self, dao, professor):
        await dao.put_professor(professor)

        updated = await dao.add_review(
            make_pending(department="MATH", course_num=241, overall=1, material=1, difficulties=1)
        )

        assert updated.courses == ["CSC 101", "MATH 241"]
        assert [r.id for r in updated.reviews["MATH 241"]] == ["r3"]
        assert updated.num_evals == 3
        assert updated.overall_rating == 3.0
        assert updated.material_clear == 2.33

    @pytest.mark.asyncio
    async def test_first_review_seeds_statistics(self, dao):
        await dao.put_professor(
            make_professor(
                num_evals=0,
                overall_rating=0,
                material_clear=0,
                student_difficulties=0,
                courses=[],
                reviews={},
            )
        )

        updated = await dao.add_review(make_pending(overall=3.5, material=2, difficulties=4))

        assert updated.num_evals == 1
        assert updated.overall_rating == 3.5
        assert updated.material_clear == 2.0
        assert updated.student_difficulties == 4.0
        assert updated.courses == ["CSC 101"]

    @pytest.mark.asyncio
    async def test_duplicate_review_id_conflicts(self, dao, bindings, professor):
        await dao.put_professor(professor)
        before = bindings.professors.data["p1"]

        with pytest.raises(StateConflictError) as exc_info:
            await dao.add_review(make_pending(review_id="r2"))

        assert exc_info.value.status_code == 409
        assert bindings.professors.data["p1"] == before

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [ReviewStatus.QUEUED, ReviewStatus.FAILED])
    async def test_unanalyzed_review_is_rejected(self, dao, bindings, professor, status):
        await dao.put_professor(professor)
        before = dict(bindings.professors.data)

        with pytest.raises(PreconditionFailedError):
            await dao.add_review(make_pending(status=status))

        assert bindings.professors.data == before

    @pytest.mark.asyncio
    async def test_missing_professor(self, dao):
        with pytest.raises(NotFoundError):
            await dao.add_review(make_pending(professor_id="ghost"))

    @pytest.mark.asyncio
    async def test_invalid_pending_review(self, dao, professor):
        await dao.put_professor(professor)
        pending = make_pending()
        pending.overall_rating = 11
        with pytest.raises(RecordValidationError):
            await dao.add_review(pending)

    @pytest.mark.asyncio
    async def test_aggregation_failure_leaves_store_untouched(
        self, dao, bindings, professor, monkeypatch
    ):
        await dao.put_professor(professor)
        before = bindings.professors.data["p1"]

        def broken_fold(prof, pending):
            prof.overall_rating = 7.5

        monkeypatch.setattr(kv_dao, "fold_review_statistics", broken_fold)

        with pytest.raises(AggregationError):
            await dao.add_review(make_pending())

        assert bindings.professors.data["p1"] == before

    @pytest.mark.asyncio
    async def test_concurrent_reviews_are_not_lost(self, dao, professor):
        await dao.put_professor(professor)

        await asyncio.gather(
            dao.add_review(make_pending(review_id="r3")),
            dao.add_review(make_pending(review_id="r4")),
        )

        stored = await dao.get_professor("p1")
        assert stored.num_evals == 4
        assert [r.id for r in stored.reviews["CSC 101"]] == ["r1", "r2", "r3", "r4"]

    @pytest.mark.asyncio
    async def test_fold_landing_on_half_rounds_up(self, dao):
        await dao.put_professor(
            make_professor(num_evals=1, reviews={"CSC 101": [make_review("r1")]})
        )

        # (4 + 3.25) / 2 = 3.625 and (3 + 2.25) / 2 = 2.625, both exact halves
        updated = await dao.add_review(make_pending(overall=3.25, material=2.25, difficulties=4))

        assert updated.overall_rating == 3.63
        assert updated.material_clear == 2.63
        assert updated.student_difficulties == 3.5

    @pytest.mark.asyncio
    async def test_professor_lock_is_released_after_commit(self, dao, professor):
        await dao.put_professor(professor)

        await dao.add_review(make_pending())

        assert "p1" not in kv_dao._professor_locks

    @pytest.mark.asyncio
    async def test_review_stubs_without_required_fields_are_rejected(self, dao, bindings):
        stub = {
            "id": "p1",
            "firstName": "Ada",
            "lastName": "Lovelace",
            "department": "CSC",
            "courses": ["CSC 101"],
            "numEvals": 2,
            "overallRating": 4.0,
            "materialClear": 3.0,
            "studentDifficulties": 3.0,
            "reviews": {"CSC 101": [{"id": "r1"}, {"id": "r2"}]},
        }
        await bindings.professors.put("p1", json.dumps(stub))
        before = bindings.professors.data["p1"]

        with pytest.raises(RecordValidationError):
            await dao.add_review(make_pending())

        assert bindings.professors.data["p1"] == before


class TestUsers:
    @pytest.mark.asyncio
    async def test_put_and_get(self, dao):
        user = User(username="admin", password_hash=hash_password("hunter22"), nickname="Admin")
        await dao.put_user(user)
        assert await dao.get_user("admin") == user

    @pytest.mark.asyncio
    async def test_missing_and_malformed_are_indistinguishable(self, dao, bindings):
        await bindings.users.put("broken", json.dumps({"username": "broken"}))

        with pytest.raises(AuthenticationError) as missing:
            await dao.get_user("nobody")
        with pytest.raises(AuthenticationError) as malformed:
            await dao.get_user("broken")

        assert missing.value.status_code == malformed.value.status_code == 401
        assert missing.value.message == malformed.value.message

    @pytest.mark.asyncio
    async def test_put_invalid_user(self, dao, bindings):
        user = User(username="admin", password_hash="x")
        user.username = "not a valid name!"
        with pytest.raises(WriteError):
            await dao.put_user(user)
        assert bindings.users.data == {}
