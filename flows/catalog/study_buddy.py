"""Study-buddy matcher."""
from typing import Any, Dict, List

from pydantic import Field, StrictFloat, StrictStr

from prompting import PromptTemplate
from validation import FlowModel

from ..base import PromptFlow
from .common import StudentProfile

FLOW_NAME = "findStudyBuddyFlow"
MAX_MATCHES = 3

PROMPT = """You are an AI that helps college students find compatible study buddies.
Your goal is to find the best matches for a student based on their major, courses, and study style.

The current user is:
Name: {{ currentUser.name }}
Major: {{ currentUser.major }}
Courses: {{ currentUser.courses | join(", ") }}
Study Style: {{ currentUser.studyStyle }}

Here is a list of potential study buddies:
{% for buddy in potentialBuddies %}
- Name: {{ buddy.name }}
  Major: {{ buddy.major }}
  Courses: {{ buddy.courses | join(", ") }}
  Study Style: {{ buddy.studyStyle }}
{% else %}
(no other students)
{% endfor %}

Analyze the list and find up to 3 of the most compatible study buddies for the current user.
A good match is someone who:
1. Is taking at least one of the same courses. This is the most important factor.
2. Has a similar major.
3. Has a compatible study style (e.g., 'Quiet' and 'Focused' are compatible, 'Group' and 'Collaborative' are compatible).

For each match, provide a compatibility score from 0-100, a brief reason for the match, and a list of the courses you have in common.
Do not match the user with themselves.
If no good matches are found, return an empty array for "matches"."""


class StudyBuddyInput(FlowModel):
    currentUser: StudentProfile
    potentialBuddies: List[StudentProfile]


class StudyBuddyMatch(FlowModel):
    name: StrictStr = Field(min_length=1, description="The name of the matched study buddy.")
    similarityScore: StrictFloat = Field(
        ge=0, le=100, allow_inf_nan=False, description="A score from 0 to 100 indicating compatibility."
    )
    reason: StrictStr = Field(description="A brief explanation for why this is a good match.")
    matchedCourses: List[StrictStr]


class StudyBuddyOutput(FlowModel):
    matches: List[StudyBuddyMatch] = Field(max_length=MAX_MATCHES)


def exclude_current_user(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop candidates carrying the current user's name."""
    me = data["currentUser"]["name"]
    others = [buddy for buddy in data["potentialBuddies"] if buddy["name"] != me]
    return {**data, "potentialBuddies": others}


study_buddy_flow = PromptFlow(
    name=FLOW_NAME,
    description="Ranks up to three compatible study partners for the current student.",
    input_schema=StudyBuddyInput,
    output_schema=StudyBuddyOutput,
    prompt=PromptTemplate(PROMPT, name="findStudyBuddyPrompt"),
    response_schema=StudyBuddyOutput,
    prepare=exclude_current_user,
)
