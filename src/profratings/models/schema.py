import re
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

RATING_MIN = 0.0
RATING_MAX = 5.0

DEPARTMENT_PATTERN = re.compile(r"^[A-Z]{2,5}$")
COURSE_PATTERN = re.compile(r"^[A-Z]{2,5} \d{3}$")


class ReviewStatus(str, Enum):
    QUEUED = "Queued"
    SUCCESSFUL = "Successful"
    FAILED = "Failed"


class Grade(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"
    CR = "CR"
    NC = "NC"
    W = "W"
    NA = "N/A"


class GradeLevel(str, Enum):
    FRESHMAN = "Freshman"
    SOPHOMORE = "Sophomore"
    JUNIOR = "Junior"
    SENIOR = "Senior"
    FIFTH_SIXTH_YEAR = "5th/6th Year"
    GRADUATE = "Graduate"


class CourseType(str, Enum):
    REQUIRED_MAJOR = "Required (Major)"
    REQUIRED_SUPPORT = "Required (Support)"
    ELECTIVE = "Elective"
    GENERAL_ED = "General Ed"
    NO_CREDIT = "No Credit"


def _check_department(v: str) -> str:
    v = v.strip().upper()
    if not DEPARTMENT_PATTERN.match(v):
        raise ValueError(f"Invalid department code: {v!r}")
    return v


class PendingReview(BaseModel):
    """A submitted review waiting on analysis before it can be committed"""

    id: str = Field(min_length=1)
    status: ReviewStatus = ReviewStatus.QUEUED
    professor: str = Field(min_length=1)
    department: str
    course_num: int = Field(alias="courseNum", ge=100, le=599)
    overall_rating: float = Field(alias="overallRating", ge=RATING_MIN, le=RATING_MAX)
    presents_material_clearly: float = Field(
        alias="presentsMaterialClearly", ge=RATING_MIN, le=RATING_MAX
    )
    recognizes_student_difficulties: float = Field(
        alias="recognizesStudentDifficulties", ge=RATING_MIN, le=RATING_MAX
    )
    grade_level: GradeLevel = Field(alias="gradeLevel")
    grade: Grade
    course_type: CourseType = Field(alias="courseType")
    rating: str = Field(min_length=1, max_length=8192)
    post_date: datetime = Field(alias="postDate", default_factory=datetime.now)
    error: Optional[str] = None

    @field_validator("department")
    @classmethod
    def validate_department(cls, v):
        return _check_department(v)

    @property
    def course_name(self) -> str:
        return f"{self.department} {self.course_num}"

    model_config = ConfigDict(populate_by_name=True)


class Review(BaseModel):
    """Review committed under a professor's course"""

    id: str = Field(min_length=1)
    professor: str = Field(min_length=1)
    grade_level: GradeLevel = Field(alias="gradeLevel")
    grade: Grade
    course_type: CourseType = Field(alias="courseType")
    rating: str = Field(min_length=1, max_length=8192)
    post_date: datetime = Field(alias="postDate", default_factory=datetime.now)

    @classmethod
    def from_pending_review(cls, pending: PendingReview) -> "Review":
        return cls(
            id=pending.id,
            professor=pending.professor,
            grade_level=pending.grade_level,
            grade=pending.grade,
            course_type=pending.course_type,
            rating=pending.rating,
            post_date=pending.post_date,
        )

    model_config = ConfigDict(populate_by_name=True)


class ProfessorListing(BaseModel):
    """Review-less professor projection, as stored in the aggregate list"""

    id: str = Field(min_length=1)
    first_name: str = Field(alias="firstName", min_length=1)
    last_name: str = Field(alias="lastName", min_length=1)
    department: str
    courses: List[str] = Field(default_factory=list)
    num_evals: int = Field(alias="numEvals", default=0, ge=0)
    overall_rating: float = Field(
        alias="overallRating", default=0.0, ge=RATING_MIN, le=RATING_MAX
    )
    material_clear: float = Field(
        alias="materialClear", default=0.0, ge=RATING_MIN, le=RATING_MAX
    )
    student_difficulties: float = Field(
        alias="studentDifficulties", default=0.0, ge=RATING_MIN, le=RATING_MAX
    )

    @field_validator("department")
    @classmethod
    def validate_department(cls, v):
        return _check_department(v)

    @field_validator("courses")
    @classmethod
    def validate_courses(cls, v):
        for course in v:
            if not COURSE_PATTERN.match(course):
                raise ValueError(f"Invalid course name: {course!r}")
        return v

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    model_config = ConfigDict(populate_by_name=True)


class Professor(ProfessorListing):
    """Professor record with reviews grouped by course name"""

    reviews: Dict[str, List[Review]] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_review_courses(self):
        # Every review bucket must belong to a listed course
        unknown = [course for course in self.reviews if course not in self.courses]
        if unknown:
            raise ValueError(f"Reviews reference unlisted courses: {unknown}")
        return self

    def to_listing(self) -> ProfessorListing:
        return ProfessorListing.model_validate(self.model_dump(exclude={"reviews"}))


class User(BaseModel):
    """Credential record keyed by username"""

    username: str = Field(min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_.-]+$")
    password_hash: str = Field(alias="password", min_length=1)
    nickname: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)
