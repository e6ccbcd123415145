"""Schemas shared by several flows."""
from typing import List, Literal, Optional

from pydantic import Field, StrictStr

from validation import FlowModel


class ChatTurn(FlowModel):
    role: Literal["user", "model"]
    content: StrictStr = Field(min_length=1)


History = Optional[List[ChatTurn]]


class StudentProfile(FlowModel):
    name: StrictStr = Field(min_length=1)
    major: StrictStr
    courses: List[StrictStr]
    studyStyle: StrictStr


class ChatResponse(FlowModel):
    """``{response}``, the output of every free-text chat flow."""

    response: StrictStr = Field(min_length=1, description="The assistant's answer to the user query.")
