"""Course review summarizer."""
from typing import Annotated, List

from pydantic import Field, StrictStr

from prompting import PromptTemplate
from validation import FlowModel

from ..base import PromptFlow

FLOW_NAME = "summarizeReviewsFlow"

PROMPT = """You are an academic advisor AI. Your task is to summarize student feedback for a college course to help other students make an informed decision.

Course Name: {{ courseName }}

Please read the following reviews and provide a concise, balanced summary. Mention both positive and negative points if they exist. Do not use bullet points.

Reviews:
{% for review in reviews %}
- "{{ review }}"
{% endfor %}"""


class SummaryInput(FlowModel):
    courseName: StrictStr = Field(min_length=1)
    reviews: List[Annotated[StrictStr, Field(min_length=1)]] = Field(
        description="A list of student reviews for the course."
    )


class SummaryOutput(FlowModel):
    summary: StrictStr = Field(
        min_length=1, description="A brief, neutral summary of the key points from the reviews."
    )


summarize_reviews_flow = PromptFlow(
    name=FLOW_NAME,
    description="Summarizes student reviews of a course into one neutral paragraph.",
    input_schema=SummaryInput,
    output_schema=SummaryOutput,
    prompt=PromptTemplate(PROMPT, name="summarizeReviewsPrompt"),
    response_schema=SummaryOutput,
)
