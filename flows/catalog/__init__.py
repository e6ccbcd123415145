"""Every flow the assistant serves."""

from ..base import FlowRegistry
from .campus_guide import campus_guide_flow
from .course_reviews import summarize_reviews_flow
from .recommendations import recommend_groups_flow
from .speech import text_to_speech_flow
from .study_buddy import study_buddy_flow
from .tutor import tutor_flow
from .wellness import wellness_flow

ALL_FLOWS = (
    tutor_flow,
    campus_guide_flow,
    study_buddy_flow,
    summarize_reviews_flow,
    wellness_flow,
    recommend_groups_flow,
    text_to_speech_flow,
)


def build_flow_registry() -> FlowRegistry:
    """Register every flow once; called at startup."""
    registry = FlowRegistry()
    for flow in ALL_FLOWS:
        registry.register(flow)
    return registry


__all__ = ["ALL_FLOWS", "build_flow_registry"]
