"""Reference record models for the static campus tables.

Field names are snake_case in Python and camelCase on the wire, matching the
JSON payloads the flows exchange with the frontend.
"""
from typing import Annotated, Any, Dict, List

from pydantic import BaseModel, Field

Rating = Annotated[int, Field(strict=True, ge=1, le=5, description="Star rating from 1 to 5")]


class _Record(BaseModel):
    """Immutable record serialized with camelCase aliases."""

    class Config:
        frozen = True
        populate_by_name = True

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class CampusLocation(_Record):
    name: str = Field(description="Display name, e.g. 'Main Library'")
    type: str = Field(description="Category such as Academic, Library or Recreation")
    description: str = Field(description="What the building is used for")
    hours: str = Field(description="Opening hours in free text")


class StudentProfile(_Record):
    name: str
    major: str
    courses: List[str] = Field(default_factory=list, description="Course codes, e.g. CS101")
    study_style: str = Field(alias="studyStyle", description="Quiet, Group, Collaborative, Focused or Online")


class Review(_Record):
    id: int
    author: str
    rating: Rating
    comment: str


class Course(_Record):
    id: str
    code: str
    name: str
    instructor: str
    reviews: List[Review] = Field(default_factory=list)


class Announcement(_Record):
    id: int
    title: str
    content: str
    date: str


class Event(_Record):
    id: int
    name: str
    date: str
    location: str
