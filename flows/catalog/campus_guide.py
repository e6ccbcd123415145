"""Campus guide: answers location questions with the location lookup tool."""
from typing import Any, Dict, Optional

from pydantic import Field, StrictStr

from prompting import PromptTemplate
from tools import GET_LOCATION_INFO, LocationRecord
from validation import FlowModel

from ..base import FlowOutcome, PromptFlow

FLOW_NAME = "campusGuideFlow"

PROMPT = """You are a friendly and helpful campus tour guide AI.
A student is asking a question about the campus.
Use the available tools to answer their question.
If you don't know the answer, say that you don't have that information.

Question: {{ query }}"""


class GuideInput(FlowModel):
    query: StrictStr = Field(min_length=1, description="The user question about a campus location.")


class GuideOutput(FlowModel):
    response: StrictStr = Field(min_length=1, description="The AI guide's answer to the user query.")
    location: Optional[LocationRecord] = None


def last_location(outcome: FlowOutcome) -> Optional[Dict[str, Any]]:
    """The most recent record the lookup tool actually returned."""
    for tool_round in reversed(outcome.rounds):
        for result in reversed(tool_round.results):
            if result.name == GET_LOCATION_INFO and result.ok:
                return result.content
    return None


def finalize(outcome: FlowOutcome) -> Dict[str, Any]:
    output: Dict[str, Any] = {"response": outcome.text}
    location = last_location(outcome)
    if location is not None:
        output["location"] = location
    return output


campus_guide_flow = PromptFlow(
    name=FLOW_NAME,
    description="Answers questions about campus buildings using the location lookup tool.",
    input_schema=GuideInput,
    output_schema=GuideOutput,
    prompt=PromptTemplate(PROMPT, name="campusGuidePrompt"),
    tools=(GET_LOCATION_INFO,),
    finalize=finalize,
)
