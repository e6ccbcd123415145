"""Chat screens: tutor, wellness coach and campus guide."""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Sequence

from pydantic import create_model

from flows import FlowError
from validation import FlowModel

from .base import ChatController, FormError, Notice, check_form, logger

TUTOR_FLOW = "aiTutorFlow"
WELLNESS_FLOW = "wellnessCoachFlow"
GUIDE_FLOW = "campusGuideFlow"
SPEECH_FLOW = "textToSpeechFlow"

BREATHING_EXERCISE_TEXT = (
    "Let's do a simple breathing exercise. I'll guide you. Find a comfortable position. "
    "Close your eyes if you'd like. Now, breathe in slowly through your nose for four counts. "
    "One... two... three... four. Hold your breath for four counts. One... two... three... four. "
    "Now, exhale slowly through your mouth for six counts. One... two... three... four... five... six. "
    "Let's repeat that two more times."
)
BREATHING_REQUEST = "Let's do a breathing exercise."
BREATHING_ACK = "Of course. Click the 'Listen' badge above to start the audio when it's ready."


class TutorSession(ChatController):
    """Tutor chat; one subject at a time."""

    flow_name = TUTOR_FLOW

    def __init__(self, executor, subjects: Sequence[str]):
        super().__init__(executor)
        self.subjects = tuple(subjects)
        self.subject: Optional[str] = None
        self.subject_form = create_model(
            "SubjectForm", __base__=FlowModel, subject=(Literal[self.subjects], ...)
        )

    def select_subject(self, subject: str) -> None:
        """Switch subject; the previous conversation is discarded."""
        values = check_form(self.subject_form, {"subject": subject}, {"subject": "Please select a subject."})
        self.subject = values["subject"]
        self.reset()

    async def send(self, query: Any) -> Optional[str]:
        if not self.subject:
            self.notice = Notice("No subject selected", "Please select a subject before asking a question.")
            raise FormError("Please select a subject before asking a question.", field="subject")
        return await super().send(query)

    def build_payload(self, query: str, prior: List[Dict[str, str]]) -> Dict[str, Any]:
        payload = super().build_payload(query, prior)
        payload["subject"] = self.subject
        return payload


class WellnessSession(ChatController):
    """Wellness coach chat plus the audio breathing exercise."""

    flow_name = WELLNESS_FLOW
    query_message = "Please enter a message."
    failure_notice = Notice("An error occurred.", "Sorry, I couldn't get a response at this time.")
    audio_failure_notice = Notice("Audio Error", "Couldn't generate the audio exercise. Please try again.")

    def __init__(self, executor):
        super().__init__(executor)
        self.is_synthesizing = False
        self.audio: Optional[str] = None

    async def request_breathing_exercise(self) -> Optional[str]:
        """Add the exercise exchange and synthesize its audio.

        Returns the audio data URI, or None after rolling the exchange back.
        """
        self.is_synthesizing = True
        self.audio = None
        self.notice = None
        self.last_error = None
        exchange = (
            self.history.append("user", BREATHING_REQUEST),
            self.history.append("model", BREATHING_ACK),
        )
        try:
            output = await self.executor.run(SPEECH_FLOW, {"text": BREATHING_EXERCISE_TEXT})
        except FlowError as exc:
            logger.warning("%s failed: %s (%s)", SPEECH_FLOW, exc.kind, exc.message)
            self.history.discard(*exchange)
            self.notice = self.audio_failure_notice
            self.last_error = exc
            return None
        finally:
            self.is_synthesizing = False

        self.audio = output["media"]
        return self.audio


class CampusGuideSession(ChatController):
    """Single-turn guide chat; earlier turns are only kept for display."""

    flow_name = GUIDE_FLOW
    sends_history = False

    def __init__(self, executor):
        super().__init__(executor)
        self.last_location: Optional[Dict[str, Any]] = None

    def on_reply(self, output: Dict[str, Any]) -> None:
        self.last_location = output.get("location")
