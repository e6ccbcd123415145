"""Screen controllers: local state around flow calls."""
from .base import ChatController, ConversationHistory, FormError, Notice, check_form
from .chat import (
    BREATHING_ACK,
    BREATHING_EXERCISE_TEXT,
    BREATHING_REQUEST,
    CampusGuideSession,
    TutorSession,
    WellnessSession,
)
from .screens import (
    CourseReviewsScreen,
    Recommendations,
    RecommendationsForm,
    StudyBuddyFinder,
    split_list,
)

__all__ = [
    "BREATHING_ACK",
    "BREATHING_EXERCISE_TEXT",
    "BREATHING_REQUEST",
    "CampusGuideSession",
    "ChatController",
    "ConversationHistory",
    "CourseReviewsScreen",
    "FormError",
    "Notice",
    "Recommendations",
    "RecommendationsForm",
    "StudyBuddyFinder",
    "TutorSession",
    "WellnessSession",
    "check_form",
    "split_list",
]
