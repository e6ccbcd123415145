"""Text to speech."""
from pydantic import Field, StrictStr

from validation import FlowModel

from ..base import SpeechFlow

FLOW_NAME = "textToSpeechFlow"


class SpeechInput(FlowModel):
    text: StrictStr = Field(min_length=1, description="Text to read aloud.")


class SpeechOutput(FlowModel):
    media: StrictStr = Field(
        pattern=r"^data:audio/wav;base64,.+",
        description="WAV audio as a base64 data URI.",
    )


text_to_speech_flow = SpeechFlow(
    name=FLOW_NAME,
    description="Reads text aloud and returns the audio as a WAV data URI.",
    input_schema=SpeechInput,
    output_schema=SpeechOutput,
)
