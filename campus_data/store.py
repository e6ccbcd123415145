"""Read-only reference tables, built once at process start."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from . import mock_data
from .models import Announcement, CampusLocation, Course, Event, StudentProfile


@dataclass(frozen=True)
class ReferenceData:
    """In-memory reference tables shared by tools, flows and controllers."""

    locations: Tuple[CampusLocation, ...]
    courses: Tuple[Course, ...]
    students: Tuple[StudentProfile, ...]
    announcements: Tuple[Announcement, ...]
    events: Tuple[Event, ...]
    tutor_subjects: Tuple[str, ...] = ()
    campus_groups: Tuple[str, ...] = ()
    campus_activities: Tuple[str, ...] = ()
    course_codes: Tuple[str, ...] = ()
    study_styles: Tuple[str, ...] = field(default=())

    def find_location(self, name: str) -> Optional[CampusLocation]:
        """Case-insensitive exact match on the location name."""
        wanted = name.casefold()
        for location in self.locations:
            if location.name.casefold() == wanted:
                return location
        return None

    def location_names(self) -> List[str]:
        return [location.name for location in self.locations]

    def get_course(self, course_id: str) -> Optional[Course]:
        for course in self.courses:
            if course.id == course_id:
                return course
        return None

    def get_student(self, name: str) -> Optional[StudentProfile]:
        for student in self.students:
            if student.name == name:
                return student
        return None

    @property
    def current_user(self) -> StudentProfile:
        """The demo user the frontend signs in as."""
        return self.students[0]


def load_reference_data() -> ReferenceData:
    """Build the reference tables from the bundled sample data."""
    return ReferenceData(
        locations=tuple(mock_data.CAMPUS_LOCATIONS),
        courses=tuple(mock_data.COURSES),
        students=tuple(mock_data.STUDENT_PROFILES),
        announcements=tuple(mock_data.ANNOUNCEMENTS),
        events=tuple(mock_data.EVENTS),
        tutor_subjects=tuple(mock_data.TUTOR_SUBJECTS),
        campus_groups=tuple(mock_data.CAMPUS_GROUPS),
        campus_activities=tuple(mock_data.CAMPUS_ACTIVITIES),
        course_codes=tuple(mock_data.ALL_COURSE_CODES),
        study_styles=tuple(mock_data.STUDY_STYLES),
    )
