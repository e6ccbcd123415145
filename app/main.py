"""FastAPI backend server for the Campus Assistant."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Literal, Optional, Tuple

from dotenv import load_dotenv
from fastapi import APIRouter, Body, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from campus_data import ReferenceData, load_reference_data
from controllers import (
    CampusGuideSession,
    ChatController,
    CourseReviewsScreen,
    FormError,
    RecommendationsForm,
    StudyBuddyFinder,
    TutorSession,
    WellnessSession,
)
from flows import FlowError, FlowExecutor
from shared.config import Configuration

# --------------------------------------------------------------------------- #
# Environment / logging setup
# --------------------------------------------------------------------------- #

load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("campus.api")

Assistant = Literal["tutor", "wellness", "guide"]

# --------------------------------------------------------------------------- #
# Pydantic models
# --------------------------------------------------------------------------- #


class HealthResponse(BaseModel):
    status: str
    message: str


class SimpleStatusResponse(BaseModel):
    status: str
    message: str


class ChatHistoryMessage(BaseModel):
    role: Literal["user", "model"]
    content: str


class ChatRequest(BaseModel):
    session_id: str = Field(..., description="Client-defined session identifier")
    message: str = Field(..., description="User message for the assistant")
    subject: Optional[str] = Field(default=None, description="Tutor subject; changing it clears the history")
    reset: bool = Field(False, description="Reset the chat session before sending the message")


class ChatResponse(BaseModel):
    session_id: str
    assistant: str
    response: str
    history: List[ChatHistoryMessage]
    location: Optional[Dict[str, Any]] = Field(default=None, description="Campus guide: last location looked up")


class ChatHistoryResponse(BaseModel):
    session_id: str
    history: List[ChatHistoryMessage]


class BreathingExerciseResponse(BaseModel):
    session_id: str
    media: str
    history: List[ChatHistoryMessage]


class ReviewRequest(BaseModel):
    rating: Any = Field(default=None, description="1 to 5")
    comment: str = Field(default="", description="At least 10 characters")


class SummaryResponse(BaseModel):
    course_id: str
    summary: str


class StudyBuddyRequest(BaseModel):
    courses: Optional[List[str]] = Field(default=None, description="Defaults to the current user's courses")
    study_style: Optional[str] = Field(default=None, alias="studyStyle")

    class Config:
        populate_by_name = True


class StudyBuddyResponse(BaseModel):
    matches: List[Dict[str, Any]]


class RecommendationsRequest(BaseModel):
    interests: str


class RecommendationsResponse(BaseModel):
    groups: List[str]
    activities: List[str]


# --------------------------------------------------------------------------- #
# Shared state helpers
# --------------------------------------------------------------------------- #


def _reference_data(request: Request) -> ReferenceData:
    return request.app.state.reference_data


def _require_executor(request: Request) -> FlowExecutor:
    """Return the flow executor or raise when the model is not configured."""
    config_error = request.app.state.config_error
    if config_error:
        raise HTTPException(
            status_code=503,
            detail=f"Configuration error: {config_error}",
        )
    return request.app.state.executor


def _new_session(assistant: str, executor: FlowExecutor, data: ReferenceData) -> ChatController:
    if assistant == "tutor":
        return TutorSession(executor, data.tutor_subjects)
    if assistant == "wellness":
        return WellnessSession(executor)
    return CampusGuideSession(executor)


async def _get_session(request: Request, assistant: str, session_id: str) -> Optional[ChatController]:
    async with request.app.state.chat_lock:
        return request.app.state.chat_sessions.get((assistant, session_id))


def _history(session: Optional[ChatController]) -> List[ChatHistoryMessage]:
    if session is None:
        return []
    return [ChatHistoryMessage(**turn) for turn in session.history]


def _flow_failure(screen: Any) -> HTTPException:
    """Generic notice for a failed screen action; details stay in the log."""
    error: FlowError = screen.last_error
    notice = screen.notice
    return HTTPException(
        status_code=error.http_status,
        detail={"error": error.kind, "message": notice.description if notice else error.message},
    )


# --------------------------------------------------------------------------- #
# API Routes
# --------------------------------------------------------------------------- #

router = APIRouter()


@router.get("/", response_model=HealthResponse)
async def root() -> HealthResponse:
    """Root endpoint - health check."""
    return HealthResponse(status="ok", message="Campus Assistant API is running")


@router.get("/api/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Health check endpoint."""
    if request.app.state.config_error:
        return HealthResponse(status="degraded", message=request.app.state.config_error)
    return HealthResponse(status="healthy", message="Backend is operational")


# --------------------------------------------------------------------------- #
# Reference data endpoints
# --------------------------------------------------------------------------- #


@router.get("/api/dashboard")
async def dashboard(request: Request) -> Dict[str, Any]:
    """Announcements, upcoming events and the signed-in student."""
    data = _reference_data(request)
    return {
        "currentUser": data.current_user.to_payload(),
        "announcements": [a.to_payload() for a in data.announcements],
        "events": [e.to_payload() for e in data.events],
    }


@router.get("/api/announcements")
async def list_announcements(request: Request) -> List[Dict[str, Any]]:
    return [a.to_payload() for a in _reference_data(request).announcements]


@router.get("/api/events")
async def list_events(request: Request) -> List[Dict[str, Any]]:
    return [e.to_payload() for e in _reference_data(request).events]


@router.get("/api/locations")
async def list_locations(request: Request) -> List[Dict[str, Any]]:
    return [loc.to_payload() for loc in _reference_data(request).locations]


@router.get("/api/courses")
async def list_courses(request: Request) -> List[Dict[str, Any]]:
    """Courses with their reviews, including reviews submitted in this process."""
    screen: CourseReviewsScreen = request.app.state.course_reviews
    courses = []
    for course in _reference_data(request).courses:
        payload = course.to_payload()
        payload["reviews"] = [r.to_payload() for r in screen.course_reviews(course.id)]
        courses.append(payload)
    return courses


@router.get("/api/students")
async def list_students(request: Request) -> List[Dict[str, Any]]:
    return [s.to_payload() for s in _reference_data(request).students]


@router.get("/api/tutor/subjects")
async def list_tutor_subjects(request: Request) -> List[str]:
    return list(_reference_data(request).tutor_subjects)


@router.get("/api/campus/groups")
async def list_campus_groups(request: Request) -> Dict[str, List[str]]:
    data = _reference_data(request)
    return {"groups": list(data.campus_groups), "activities": list(data.campus_activities)}


# --------------------------------------------------------------------------- #
# Flow endpoints
# --------------------------------------------------------------------------- #


@router.get("/api/flows")
async def list_flows(request: Request) -> List[Dict[str, Any]]:
    """Registered flows with their input and output JSON schemas."""
    return request.app.state.executor.flows.describe()


@router.post("/api/flows/{flow_name}")
async def run_flow(flow_name: str, request: Request, payload: Any = Body(default=None)) -> Dict[str, Any]:
    """Run one flow; failures come back as ``{error, message, violations?}``."""
    executor = _require_executor(request)
    logger.info("FLOW REQUEST: %s", flow_name)
    return await executor.run(flow_name, payload)


# --------------------------------------------------------------------------- #
# Chat endpoints
# --------------------------------------------------------------------------- #


@router.post("/api/chat/{assistant}", response_model=ChatResponse)
async def chat(assistant: Assistant, payload: ChatRequest, request: Request) -> ChatResponse:
    """Send a message to one of the chat assistants."""
    executor = _require_executor(request)
    key: Tuple[str, str] = (assistant, payload.session_id)
    async with request.app.state.chat_lock:
        sessions: Dict[Tuple[str, str], ChatController] = request.app.state.chat_sessions
        if payload.reset:
            sessions.pop(key, None)
        session = sessions.get(key)
        if session is None:
            session = _new_session(assistant, executor, _reference_data(request))
            sessions[key] = session

    if isinstance(session, TutorSession) and payload.subject and payload.subject != session.subject:
        session.select_subject(payload.subject)

    logger.info("CHAT REQUEST: assistant=%s session=%s message='%s...'", assistant, payload.session_id, payload.message[:50])
    reply = await session.send(payload.message)
    if reply is None:
        raise _flow_failure(session)

    return ChatResponse(
        session_id=payload.session_id,
        assistant=assistant,
        response=reply,
        history=_history(session),
        location=session.last_location if isinstance(session, CampusGuideSession) else None,
    )


@router.get("/api/chat/{assistant}/{session_id}/history", response_model=ChatHistoryResponse)
async def get_chat_history(assistant: Assistant, session_id: str, request: Request) -> ChatHistoryResponse:
    """Return chat history for a specific session."""
    session = await _get_session(request, assistant, session_id)
    return ChatHistoryResponse(session_id=session_id, history=_history(session))


@router.delete("/api/chat/{assistant}/{session_id}", response_model=SimpleStatusResponse)
async def reset_chat_session(assistant: Assistant, session_id: str, request: Request) -> SimpleStatusResponse:
    """Delete a chat session and its history."""
    async with request.app.state.chat_lock:
        existed = request.app.state.chat_sessions.pop((assistant, session_id), None)
    if not existed:
        raise HTTPException(status_code=404, detail="Session not found")
    return SimpleStatusResponse(status="ok", message=f"Session '{session_id}' cleared.")


@router.post("/api/wellness/{session_id}/breathing-exercise", response_model=BreathingExerciseResponse)
async def breathing_exercise(session_id: str, request: Request) -> BreathingExerciseResponse:
    """Add the breathing exercise exchange and return its audio."""
    executor = _require_executor(request)
    key = ("wellness", session_id)
    async with request.app.state.chat_lock:
        session = request.app.state.chat_sessions.get(key)
        if session is None:
            session = WellnessSession(executor)
            request.app.state.chat_sessions[key] = session

    media = await session.request_breathing_exercise()
    if media is None:
        raise _flow_failure(session)
    return BreathingExerciseResponse(session_id=session_id, media=media, history=_history(session))


# --------------------------------------------------------------------------- #
# Screen endpoints
# --------------------------------------------------------------------------- #


def _course_screen(request: Request, course_id: str) -> CourseReviewsScreen:
    """The shared reviews screen; actions pass ``course_id`` instead of selecting it."""
    if _reference_data(request).get_course(course_id) is None:
        raise HTTPException(status_code=404, detail="Course not found")
    return request.app.state.course_reviews


@router.post("/api/courses/{course_id}/reviews")
async def submit_review(course_id: str, payload: ReviewRequest, request: Request) -> Dict[str, Any]:
    """Add a review by the signed-in student to the top of the course's list."""
    screen = _course_screen(request, course_id)
    review = screen.submit_review(payload.rating, payload.comment, course_id=course_id)
    return review.to_payload()


@router.post("/api/courses/{course_id}/summary", response_model=SummaryResponse)
async def summarize_course(course_id: str, request: Request) -> SummaryResponse:
    """Summarize a course's reviews; needs at least two."""
    _require_executor(request)
    screen = _course_screen(request, course_id)
    summary = await screen.generate_summary(course_id)
    if summary is None:
        raise _flow_failure(screen)
    return SummaryResponse(course_id=course_id, summary=summary)


@router.post("/api/study-buddy/matches", response_model=StudyBuddyResponse)
async def study_buddy_matches(payload: StudyBuddyRequest, request: Request) -> StudyBuddyResponse:
    """Find up to three study partners for the signed-in student."""
    executor = _require_executor(request)
    finder = StudyBuddyFinder(executor, _reference_data(request))
    defaults = finder.defaults()
    matches = await finder.find_matches(
        payload.courses if payload.courses is not None else defaults["courses"],
        payload.study_style if payload.study_style is not None else defaults["studyStyle"],
    )
    if matches is None:
        raise _flow_failure(finder)
    return StudyBuddyResponse(matches=matches)


@router.post("/api/recommendations", response_model=RecommendationsResponse)
async def recommendations(payload: RecommendationsRequest, request: Request) -> RecommendationsResponse:
    """Recommend campus groups and activities for the given interests."""
    executor = _require_executor(request)
    form = RecommendationsForm(executor, _reference_data(request))
    result = await form.submit(payload.interests)
    if result is None:
        raise _flow_failure(form)
    return RecommendationsResponse(groups=result.groups, activities=result.activities)


# --------------------------------------------------------------------------- #
# Application factory
# --------------------------------------------------------------------------- #


async def _flow_error_handler(request: Request, exc: FlowError) -> JSONResponse:
    logger.info("FLOW ERROR: %s %s", exc.kind, exc.message)
    return JSONResponse(status_code=exc.http_status, content=exc.to_payload())


async def _form_error_handler(request: Request, exc: FormError) -> JSONResponse:
    return JSONResponse(status_code=exc.http_status, content=exc.to_payload())


def create_app(
    executor: Optional[FlowExecutor] = None,
    reference_data: Optional[ReferenceData] = None,
    config: Optional[Configuration] = None,
) -> FastAPI:
    """Build the API; registries and clients are created once at startup.

    Passing ``executor`` skips configuration checks (used by tests).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        data = reference_data or load_reference_data()
        app.state.reference_data = data
        app.state.config_error = None
        if executor is not None:
            app.state.executor = executor
        else:
            cfg = config or Configuration()
            try:
                cfg.validate()
                logger.info("Configuration loaded successfully.")
            except ValueError as exc:
                app.state.config_error = str(exc)
                logger.warning("Configuration validation failed: %s", exc)
            app.state.executor = FlowExecutor.from_config(cfg, data)
        app.state.chat_sessions = {}
        app.state.chat_lock = asyncio.Lock()
        app.state.course_reviews = CourseReviewsScreen(app.state.executor, data)
        logger.info("Registered flows: %s", ", ".join(app.state.executor.flows.names()))
        yield
        app.state.chat_sessions.clear()

    app = FastAPI(
        title="Campus Assistant API",
        description="Dashboard data plus AI tutor, wellness coach, campus guide, study buddy and review flows.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://localhost:5173",
            "http://localhost:9002",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
            "http://127.0.0.1:9002",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(FlowError, _flow_error_handler)
    app.add_exception_handler(FormError, _form_error_handler)
    app.include_router(router)
    return app


app = create_app()


# --------------------------------------------------------------------------- #
# Entrypoint
# --------------------------------------------------------------------------- #


if __name__ == "__main__":
    import uvicorn

    print("=" * 60)
    print("Starting Campus Assistant Backend Server")
    print("=" * 60)
    print("Server will be available at: http://localhost:8000")
    print("API documentation: http://localhost:8000/docs")
    print("=" * 60)

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )
