"""Static campus reference data."""
from .models import (
    Announcement,
    CampusLocation,
    Course,
    Event,
    Rating,
    Review,
    StudentProfile,
)
from .store import ReferenceData, load_reference_data

__all__ = [
    "Announcement",
    "CampusLocation",
    "Course",
    "Event",
    "Rating",
    "Review",
    "StudentProfile",
    "ReferenceData",
    "load_reference_data",
]
