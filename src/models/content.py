"""
Content Data Models

Dashboard content categories, the per-category record schemas, and the
cache entry that holds one category's records for a session.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ContentCategory(str, Enum):
    """One dashboard content tab."""

    COURSES = "courses"
    JOBS = "jobs"
    EXAM_HELPER = "examHelper"
    MOCK_INTERVIEW = "mockInterview"
    SAMPLE_QUESTIONS = "sampleQuestions"
    PROGRESS = "progress"
    TRENDS = "trends"
    SALARY = "salary"
    STUDY_MATERIAL = "studyMaterial"

    @classmethod
    def resolve(cls, value: Union[str, "ContentCategory", None]) -> Optional["ContentCategory"]:
        """Return the category for a tab name, or None if unknown or empty."""
        if value is None or value == "":
            return None
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


def _stringify(value: Any) -> Any:
    """Generators emit fees and salaries as numbers as often as strings."""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return str(value)
    return value


def _text(value: Any) -> Any:
    value = _stringify(value)
    if isinstance(value, (list, tuple)):
        return ", ".join(str(_stringify(item)) for item in value)
    if isinstance(value, dict):
        return ", ".join(f"{k}: {_stringify(v)}" for k, v in value.items())
    return value


Text = Annotated[Optional[str], BeforeValidator(_text)]


def _string_list(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple)):
        return [str(_stringify(item)) for item in value]
    return [str(_stringify(value))]


TextList = Annotated[Optional[list[str]], BeforeValidator(_string_list)]


class ContentRecord(BaseModel):
    """Base record: every field optional, unknown keys kept.

    Generated output is tolerated even when it violates the field contract;
    missing fields simply produce an incomplete display.
    """

    model_config = ConfigDict(
        extra="allow",
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_display(self) -> dict[str, Any]:
        """Return the record with its wire (camelCase) field names."""
        return self.model_dump(by_alias=True, exclude_none=True)


class CourseRecord(ContentRecord):
    title: Text = None
    duration: Text = None
    provider: Text = None
    fee: Text = None
    url: Text = None
    button_text: Text = None


class JobRecord(ContentRecord):
    title: Text = None
    experience: Text = None
    provider: Text = None
    salary: Text = None
    location: Text = None
    url: Text = None
    button_text: Text = None


class ExamRecord(ContentRecord):
    title: Text = None
    description: Text = None
    conducting_body: Text = None
    eligibility: Text = None
    application_process: Text = None
    exam_date: Text = None
    fee: Text = None
    syllabus: Text = None
    url: Text = None
    button_text: Text = None


class MockInterviewRecord(ContentRecord):
    title: Text = None
    difficulty: Text = None
    duration: Text = None
    topics: TextList = None
    url: Text = None
    button_text: Text = None


class SampleQuestionRecord(ContentRecord):
    subject: Text = None
    question: Text = None
    options: TextList = None
    correct_answer: Text = None
    explanation: Text = None


class ProgressRecord(ContentRecord):
    milestone: Text = None
    description: Text = None
    timeframe: Text = None


class TrendRecord(ContentRecord):
    title: Text = None
    description: Text = None
    impact: Text = None
    action: Text = None


class SalaryRecord(ContentRecord):
    title: Text = None
    average_salary: Text = None
    entry_salary: Text = None
    senior_salary: Text = None
    growth_outlook: Text = None


class StudyMaterialRecord(ContentRecord):
    title: Text = None
    material_type: Text = Field(default=None, alias="type")
    author: Text = None
    description: Text = None
    difficulty: Text = None
    url: Text = None
    cost: Text = None
    time_to_complete: Text = None


class CategorySpec(BaseModel):
    """Generation contract for one category."""

    model_config = ConfigDict(frozen=True)

    category: ContentCategory
    record_model: type[ContentRecord]
    batch_size: int
    fields: tuple[str, ...]
    button_text: Optional[str] = None
    generated: bool = True


CATEGORY_SPECS: dict[ContentCategory, CategorySpec] = {
    spec.category: spec
    for spec in (
        CategorySpec(
            category=ContentCategory.COURSES,
            record_model=CourseRecord,
            batch_size=6,
            fields=("title", "duration", "provider", "fee", "url", "buttonText"),
            button_text="Enroll Now",
        ),
        CategorySpec(
            category=ContentCategory.JOBS,
            record_model=JobRecord,
            batch_size=6,
            fields=("title", "experience", "provider", "salary", "location", "url", "buttonText"),
            button_text="Apply Now",
        ),
        CategorySpec(
            category=ContentCategory.EXAM_HELPER,
            record_model=ExamRecord,
            batch_size=4,
            fields=(
                "title",
                "description",
                "conductingBody",
                "eligibility",
                "applicationProcess",
                "examDate",
                "fee",
                "syllabus",
                "url",
                "buttonText",
            ),
            button_text="Access Now",
        ),
        CategorySpec(
            category=ContentCategory.MOCK_INTERVIEW,
            record_model=MockInterviewRecord,
            batch_size=6,
            fields=("title", "difficulty", "duration", "topics", "url", "buttonText"),
            button_text="Start Practice",
        ),
        CategorySpec(
            category=ContentCategory.SAMPLE_QUESTIONS,
            record_model=SampleQuestionRecord,
            batch_size=5,
            fields=("subject", "question", "options", "correctAnswer", "explanation"),
        ),
        CategorySpec(
            category=ContentCategory.PROGRESS,
            record_model=ProgressRecord,
            batch_size=3,
            fields=("milestone", "description", "timeframe"),
            generated=False,
        ),
        CategorySpec(
            category=ContentCategory.TRENDS,
            record_model=TrendRecord,
            batch_size=6,
            fields=("title", "description", "impact", "action"),
        ),
        CategorySpec(
            category=ContentCategory.SALARY,
            record_model=SalaryRecord,
            batch_size=6,
            fields=("title", "averageSalary", "entrySalary", "seniorSalary", "growthOutlook"),
        ),
        CategorySpec(
            category=ContentCategory.STUDY_MATERIAL,
            record_model=StudyMaterialRecord,
            batch_size=6,
            fields=(
                "title",
                "type",
                "author",
                "description",
                "difficulty",
                "url",
                "cost",
                "timeToComplete",
            ),
        ),
    )
}


class CacheEntry(BaseModel):
    """One category's cached records.

    Entries are frozen; a refresh replaces the whole entry.
    """

    model_config = ConfigDict(frozen=True)

    category: ContentCategory
    records: tuple[ContentRecord, ...]
    fetched_at: datetime

    def is_fresh(self, now: datetime) -> bool:
        """Fresh while fetched on the same calendar day as ``now``."""
        return self.fetched_at.date() == now.date()
