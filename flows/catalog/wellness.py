"""Wellness coach: supportive multi-turn chat with a fixed crisis referral."""
from pydantic import Field, StrictStr

from prompting import PromptTemplate
from validation import FlowModel

from ..base import PromptFlow
from .common import ChatResponse, History

FLOW_NAME = "wellnessCoachFlow"

CRISIS_RESOURCES = (
    "Campus Counseling Services at (555) 123-4567 or the National Crisis and Suicide Lifeline at 988"
)

SYSTEM_PROMPT = f"""You are an AI Wellness Coach for college students. Your persona is calm, empathetic, and supportive.
Your primary goal is to provide helpful, actionable advice and mindfulness exercises.
You are not a therapist. If a user expresses severe distress, thoughts of self-harm, or a mental health crisis, you MUST gently guide them to real-world resources and provide the following contact information: "{CRISIS_RESOURCES}." Do not attempt to handle the crisis yourself.
For general stress, anxiety, or questions, provide practical tips, encouragement, or guided exercises (like breathing or grounding techniques).
Keep your responses concise and easy to understand."""


class WellnessInput(FlowModel):
    query: StrictStr = Field(
        min_length=1, description="The user's question or statement about their well-being."
    )
    history: History = Field(default=None, description="The conversation history.")


wellness_flow = PromptFlow(
    name=FLOW_NAME,
    description="Offers stress and mindfulness support; refers crises to campus and national resources.",
    input_schema=WellnessInput,
    output_schema=ChatResponse,
    system=PromptTemplate(SYSTEM_PROMPT, name="wellnessSystem"),
    prompt=PromptTemplate("{{ query }}", name="wellnessPrompt"),
    history_field="history",
)
