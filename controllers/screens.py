"""Form screens: course reviews, study-buddy finder, recommendations."""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Sequence

from pydantic import Field, StrictStr, create_model

from campus_data import Course, Rating, ReferenceData, Review
from flows import FlowError
from validation import FlowModel

from .base import FormError, Notice, check_form, logger

SUMMARY_FLOW = "summarizeReviewsFlow"
STUDY_BUDDY_FLOW = "findStudyBuddyFlow"
RECOMMEND_FLOW = "recommendGroupsFlow"

MIN_REVIEWS_FOR_SUMMARY = 2
MIN_COMMENT_LENGTH = 10
MIN_INTERESTS_LENGTH = 10


class ReviewForm(FlowModel):
    rating: Rating
    comment: StrictStr = Field(min_length=MIN_COMMENT_LENGTH)


REVIEW_MESSAGES = {
    "rating": "Please select a rating.",
    "comment": f"Comment must be at least {MIN_COMMENT_LENGTH} characters.",
}


class InterestsForm(FlowModel):
    interests: StrictStr = Field(min_length=MIN_INTERESTS_LENGTH)


class CourseReviewsScreen:
    """Course list with locally added reviews and AI summaries.

    ``selected`` is display state only: every action takes an explicit
    ``course_id`` and falls back to the selection when it is omitted, so one
    screen can serve several callers.
    """

    def __init__(self, executor, data: ReferenceData):
        self.executor = executor
        self.data = data
        self.reviews: Dict[str, List[Review]] = {c.id: list(c.reviews) for c in data.courses}
        self.summaries: Dict[str, str] = {}
        self.selected: Optional[Course] = data.courses[0] if data.courses else None
        self.is_summarizing = False
        self.notice: Optional[Notice] = None
        self.last_error: Optional[FlowError] = None

    @property
    def summary(self) -> Optional[str]:
        return self.summaries.get(self.selected.id) if self.selected else None

    def get_course(self, course_id: str) -> Course:
        course = self.data.get_course(course_id)
        if course is None:
            raise FormError(f"Unknown course '{course_id}'.", field="course")
        return course

    def select_course(self, course_id: str) -> Course:
        self.selected = self.get_course(course_id)
        return self.selected

    def _course(self, course_id: Optional[str]) -> Course:
        if course_id is not None:
            return self.get_course(course_id)
        if self.selected is None:
            raise FormError("Please select a course.", field="course")
        return self.selected

    def course_reviews(self, course_id: Optional[str] = None) -> List[Review]:
        return list(self.reviews.get(self._course(course_id).id, []))

    def submit_review(self, rating: Any, comment: Any, course_id: Optional[str] = None) -> Review:
        """Add the current user's review at the top of the course's list."""
        course = self._course(course_id)
        values = check_form(ReviewForm, {"rating": rating, "comment": comment}, REVIEW_MESSAGES)
        review = Review(
            id=int(time.time() * 1000),
            author=f"{self.data.current_user.name} (You)",
            rating=values["rating"],
            comment=values["comment"],
        )
        self.reviews[course.id] = [review, *self.reviews[course.id]]
        self.notice = Notice("Review submitted!", "Thank you for your feedback.", variant="default")
        return review

    async def generate_summary(self, course_id: Optional[str] = None) -> Optional[str]:
        """Summarize one course's reviews.

        Raises FormError without calling any flow when there are too few
        reviews; a flow failure leaves a notice and returns None.
        """
        course = self._course(course_id)
        self.summaries.pop(course.id, None)
        comments = [review.comment for review in self.reviews[course.id]]
        if len(comments) < MIN_REVIEWS_FOR_SUMMARY:
            self.notice = Notice("Not enough reviews", "Need at least 2 reviews to generate a summary.")
            raise FormError("Need at least 2 reviews to generate a summary.", field="reviews")

        self.is_summarizing = True
        self.notice = None
        self.last_error = None
        try:
            output = await self.executor.run(
                SUMMARY_FLOW, {"courseName": course.name, "reviews": comments}
            )
        except FlowError as exc:
            logger.warning("%s failed: %s (%s)", SUMMARY_FLOW, exc.kind, exc.message)
            self.notice = Notice(
                "Error generating summary",
                "Could not generate summary at this time. Please try again later.",
            )
            self.last_error = exc
            return None
        finally:
            self.is_summarizing = False
        self.summaries[course.id] = output["summary"]
        return output["summary"]


class StudyBuddyFinder:
    """Match the signed-in student against the other student profiles."""

    failure_notice = Notice(
        "An error occurred.",
        "Sorry, we couldn't find matches at this time. Please try again later.",
    )

    def __init__(self, executor, data: ReferenceData):
        self.executor = executor
        self.data = data
        self.matches: Optional[List[Dict[str, Any]]] = None
        self.is_loading = False
        self.notice: Optional[Notice] = None
        self.last_error: Optional[FlowError] = None
        self.form_schema = create_model(
            "StudyBuddyForm",
            __base__=FlowModel,
            courses=(List[Literal[tuple(data.course_codes)]], Field(min_length=1)),
            studyStyle=(Literal[tuple(data.study_styles)], ...),
        )

    def defaults(self) -> Dict[str, Any]:
        me = self.data.current_user
        return {"courses": list(me.courses), "studyStyle": me.study_style}

    def build_payload(self, courses: Sequence[str], study_style: str) -> Dict[str, Any]:
        values = check_form(
            self.form_schema,
            {"courses": list(courses) if courses is not None else None, "studyStyle": study_style},
            {
                "courses": "You have to select at least one course.",
                "studyStyle": "Please select a study style.",
            },
        )
        me = {**self.data.current_user.to_payload(), **values}
        candidates = [s.to_payload() for s in self.data.students if s.name != me["name"]]
        return {"currentUser": me, "potentialBuddies": candidates}

    async def find_matches(self, courses: Sequence[str], study_style: str) -> Optional[List[Dict[str, Any]]]:
        payload = self.build_payload(courses, study_style)
        self.is_loading = True
        self.matches = None
        self.notice = None
        self.last_error = None
        try:
            output = await self.executor.run(STUDY_BUDDY_FLOW, payload)
        except FlowError as exc:
            logger.warning("%s failed: %s (%s)", STUDY_BUDDY_FLOW, exc.kind, exc.message)
            self.notice = self.failure_notice
            self.last_error = exc
            return None
        finally:
            self.is_loading = False
        self.matches = output["matches"]
        return self.matches


@dataclass
class Recommendations:
    groups: List[str] = field(default_factory=list)
    activities: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[str]]:
        return {"groups": self.groups, "activities": self.activities}


def split_list(value: Optional[str]) -> List[str]:
    """Split a comma-separated model answer into trimmed, non-empty items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class RecommendationsForm:
    failure_notice = Notice(
        "An error occurred.",
        "Sorry, we couldn't get recommendations at this time. Please try again later.",
    )

    def __init__(self, executor, data: ReferenceData):
        self.executor = executor
        self.data = data
        self.recommendations: Optional[Recommendations] = None
        self.is_loading = False
        self.notice: Optional[Notice] = None
        self.last_error: Optional[FlowError] = None

    async def submit(self, interests: Any) -> Optional[Recommendations]:
        text = interests.strip() if isinstance(interests, str) else interests
        values = check_form(
            InterestsForm,
            {"interests": text},
            {"interests": "Please tell us a bit more about your interests."},
        )
        self.is_loading = True
        self.recommendations = None
        self.notice = None
        self.last_error = None
        try:
            output = await self.executor.run(
                RECOMMEND_FLOW,
                {
                    "interests": values["interests"],
                    "campusGroups": ", ".join(self.data.campus_groups),
                    "campusActivities": ", ".join(self.data.campus_activities),
                },
            )
        except FlowError as exc:
            logger.warning("%s failed: %s (%s)", RECOMMEND_FLOW, exc.kind, exc.message)
            self.notice = self.failure_notice
            self.last_error = exc
            return None
        finally:
            self.is_loading = False
        self.recommendations = Recommendations(
            groups=split_list(output["recommendedGroups"]),
            activities=split_list(output["recommendedActivities"]),
        )
        return self.recommendations
