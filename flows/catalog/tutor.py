"""AI tutor: multi-turn subject tutoring."""
from pydantic import Field, StrictStr

from prompting import PromptTemplate
from validation import FlowModel

from ..base import PromptFlow
from .common import ChatResponse, History

FLOW_NAME = "aiTutorFlow"

SYSTEM_PROMPT = """You are an expert AI Tutor. Your persona is encouraging, patient, and knowledgeable.
You are tutoring a student in: {{ subject }}.

Your goal is not to just give the answer, but to explain the underlying concepts and guide the student to understanding.
Break down complex topics into smaller, easy-to-digest pieces. Use examples and analogies where helpful."""


class TutorInput(FlowModel):
    subject: StrictStr = Field(min_length=1, description="The academic subject of the question.")
    query: StrictStr = Field(min_length=1, description="The user's question.")
    history: History = Field(default=None, description="The conversation history.")


tutor_flow = PromptFlow(
    name=FLOW_NAME,
    description="Answers a student's question about a subject, explaining the concepts behind it.",
    input_schema=TutorInput,
    output_schema=ChatResponse,
    system=PromptTemplate(SYSTEM_PROMPT, name="tutorSystem"),
    prompt=PromptTemplate("{{ query }}", name="tutorPrompt"),
    history_field="history",
)
