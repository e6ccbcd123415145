"""State carried through one flow invocation graph."""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class FlowState(BaseModel):
    """State for one flow invocation.

    Filled in stage by stage: validated input, rendered prompt, model reply
    and tool rounds, then the validated output.
    """

    # Input parameters
    flow_name: str = Field(description="Registered flow to run")
    payload: Any = Field(default=None, description="Raw caller input, not yet validated")

    # Intermediate data
    data: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Input after schema validation and defaults"
    )
    system: Optional[str] = Field(default=None, description="Rendered system instruction")
    prompt: Optional[str] = Field(default=None, description="Rendered user prompt")
    history: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="Prior turns sent to the model (already truncated)"
    )
    rounds: List[Any] = Field(
        default_factory=list,
        description="Completed tool rounds (ToolRound)"
    )
    reply: Any = Field(default=None, description="Latest ModelReply")
    media: Optional[str] = Field(default=None, description="Synthesized audio data URI")
    model_calls: int = Field(default=0, description="Model round trips made so far")

    # Output
    output: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Validated flow output"
    )

    class Config:
        arbitrary_types_allowed = True
