"""Campus group and activity recommendations."""
from pydantic import Field, StrictStr

from prompting import PromptTemplate
from validation import FlowModel

from ..base import PromptFlow

FLOW_NAME = "recommendGroupsFlow"

PROMPT = """You are a campus life expert who provides personalized recommendations for campus groups and activities based on student interests.

Student Interests: {{ interests }}
Available Campus Groups: {{ campusGroups }}
Available Campus Activities: {{ campusActivities }}

Based on the student's interests, recommend relevant campus groups and activities. Provide the recommendations as comma-separated lists."""


class RecommendationInput(FlowModel):
    interests: StrictStr = Field(min_length=1, description="A comma-separated list of the user's interests.")
    campusGroups: StrictStr = Field(min_length=1, description="A comma-separated list of available campus groups.")
    campusActivities: StrictStr = Field(
        min_length=1, description="A comma-separated list of available campus activities."
    )


class RecommendationOutput(FlowModel):
    recommendedGroups: StrictStr = Field(description="A comma-separated list of recommended campus groups.")
    recommendedActivities: StrictStr = Field(
        description="A comma-separated list of recommended campus activities."
    )


recommend_groups_flow = PromptFlow(
    name=FLOW_NAME,
    description="Recommends campus groups and activities matching a student's interests.",
    input_schema=RecommendationInput,
    output_schema=RecommendationOutput,
    prompt=PromptTemplate(PROMPT, name="groupRecommendationPrompt"),
    response_schema=RecommendationOutput,
)
