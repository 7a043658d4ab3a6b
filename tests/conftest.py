import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Generator

import pytest

# Ensure src is in python path
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

# The API must never reach for a real Redis during tests
os.environ["PROFRATINGS_KV_BACKEND"] = "memory"

from fastapi.testclient import TestClient  # noqa: E402

from profratings.api.main import app  # noqa: E402
from profratings.dao import kv_dao  # noqa: E402
from profratings.dao.kv_dao import KVDAO  # noqa: E402
from profratings.database.kv import (  # noqa: E402
    MemoryNamespace,
    StoreBindings,
    reset_memory_namespaces,
)
from profratings.models.schema import (  # noqa: E402
    CourseType,
    Grade,
    GradeLevel,
    PendingReview,
    Professor,
    Review,
    ReviewStatus,
)

POST_DATE = datetime(2024, 3, 1, 12, 0, 0)


def make_review(review_id: str, professor_id: str = "p1") -> Review:
    return Review(
        id=review_id,
        professor=professor_id,
        grade_level=GradeLevel.JUNIOR,
        grade=Grade.A,
        course_type=CourseType.REQUIRED_MAJOR,
        rating="Clear lectures and fair exams.",
        post_date=POST_DATE,
    )


def make_pending(
    review_id: str = "r3",
    professor_id: str = "p1",
    department: str = "CSC",
    course_num: int = 101,
    overall: float = 5,
    material: float = 4,
    difficulties: float = 2,
    status: ReviewStatus = ReviewStatus.SUCCESSFUL,
) -> PendingReview:
    return PendingReview(
        id=review_id,
        status=status,
        professor=professor_id,
        department=department,
        course_num=course_num,
        overall_rating=overall,
        presents_material_clearly=material,
        recognizes_student_difficulties=difficulties,
        grade_level=GradeLevel.SENIOR,
        grade=Grade.B,
        course_type=CourseType.ELECTIVE,
        rating="Tough but worth it.",
        post_date=POST_DATE,
    )


def make_professor(**overrides) -> Professor:
    fields = dict(
        id="p1",
        first_name="Ada",
        last_name="Lovelace",
        department="CSC",
        num_evals=2,
        overall_rating=4.0,
        material_clear=3.0,
        student_difficulties=3.0,
        courses=["CSC 101"],
        reviews={"CSC 101": [make_review("r1"), make_review("r2")]},
    )
    fields.update(overrides)
    return Professor(**fields)


@pytest.fixture
def bindings() -> StoreBindings:
    return StoreBindings(
        professors=MemoryNamespace("professors"),
        users=MemoryNamespace("users"),
        processing_queue=MemoryNamespace("processing_queue"),
    )


@pytest.fixture
def dao(bindings: StoreBindings) -> KVDAO:
    return KVDAO(bindings)


@pytest.fixture
def professor() -> Professor:
    return make_professor()


@pytest.fixture(autouse=True)
def clean_memory_store() -> Generator[None, None, None]:
    reset_memory_namespaces()
    kv_dao._professor_locks.clear()
    yield
    reset_memory_namespaces()
    kv_dao._professor_locks.clear()


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c
