"""Structured syllabus fields extracted by the parser.

Every field is optional; syllabi vary wildly and a partial parse is still
useful. Serialized with camelCase keys to match what the web client reads.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CourseInfo(_Model):
    title: Optional[str] = None
    instructor: Optional[str] = None
    credits: Optional[float] = None
    semester: Optional[str] = None
    year: Optional[str] = None
    course_code: Optional[str] = None
    department: Optional[str] = None


class ScheduleItem(_Model):
    day: Optional[str] = None
    time: Optional[str] = None
    location: Optional[str] = None
    # lecture | lab | discussion | exam | office_hours
    type: Optional[str] = None
    description: Optional[str] = None


class Assignment(_Model):
    name: str
    # homework | exam | project | quiz | paper | presentation
    type: Optional[str] = None
    due_date: Optional[str] = None
    weight: Optional[float] = None
    description: Optional[str] = None


class GradingPolicy(_Model):
    breakdown: dict[str, float] = Field(default_factory=dict)
    scale: dict[str, str] = Field(default_factory=dict)
    policies: list[str] = Field(default_factory=list)


class Reading(_Model):
    title: str
    author: Optional[str] = None
    required: bool = True
    week: Optional[int] = None
    chapter: Optional[str] = None
    pages: Optional[str] = None
    # textbook | article | handout | online
    type: Optional[str] = None


class Policies(_Model):
    attendance: Optional[str] = None
    late: Optional[str] = None
    academic_integrity: Optional[str] = None
    technology: Optional[str] = None
    other: list[str] = Field(default_factory=list)


class Contact(_Model):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    office: Optional[str] = None
    office_hours: Optional[str] = None


class Contacts(_Model):
    instructor: Optional[Contact] = None
    tas: list[Contact] = Field(default_factory=list)


class ParsedSyllabus(_Model):
    course_info: CourseInfo = Field(default_factory=CourseInfo)
    schedule: list[ScheduleItem] = Field(default_factory=list)
    assignments: list[Assignment] = Field(default_factory=list)
    grading_policy: GradingPolicy = Field(default_factory=GradingPolicy)
    readings: list[Reading] = Field(default_factory=list)
    policies: Policies = Field(default_factory=Policies)
    contacts: Contacts = Field(default_factory=Contacts)
    confidence: float = Field(default=0.5, ge=0, le=1)
    extracted_fields: list[str] = Field(default_factory=list)


class ParsingResult(_Model):
    success: bool
    data: Optional[ParsedSyllabus] = None
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    confidence: float = 0.0
    requires_review: bool = True
    # "ai" | "heuristic"
    source: str = "ai"
