import asyncio
import json

import pytest

from conftest import FakeSpeechClient, tool_call
from controllers import (
    BREATHING_ACK,
    BREATHING_EXERCISE_TEXT,
    BREATHING_REQUEST,
    CampusGuideSession,
    CourseReviewsScreen,
    FormError,
    RecommendationsForm,
    StudyBuddyFinder,
    TutorSession,
    WellnessSession,
    split_list,
)
from flows import InvalidInput, MalformedModelOutput, ModelReply, ModelServiceError
from tools import GET_LOCATION_INFO


@pytest.fixture()
def tutor(executor, reference_data):
    session = TutorSession(executor, reference_data.tutor_subjects)
    session.select_subject("Physics")
    return session


# Chat screens


@pytest.mark.asyncio
async def test_chat_appends_user_and_model_turns(tutor, fake_model):
    fake_model.queue("Inertia is resistance to change in motion.", "Force is mass times acceleration.")
    await tutor.send("What is inertia?")
    reply = await tutor.send("  And force?  ")

    assert reply == "Force is mass times acceleration."
    assert tutor.history.to_list() == [
        {"role": "user", "content": "What is inertia?"},
        {"role": "model", "content": "Inertia is resistance to change in motion."},
        {"role": "user", "content": "And force?"},
        {"role": "model", "content": "Force is mass times acceleration."},
    ]
    first, second = fake_model.requests
    assert first.history == ()
    assert [turn["content"] for turn in second.history] == [
        "What is inertia?",
        "Inertia is resistance to change in motion.",
    ]
    assert second.prompt == "And force?"
    assert tutor.is_loading is False


@pytest.mark.asyncio
async def test_chat_failure_rolls_back_the_user_turn(tutor, fake_model):
    fake_model.queue("First answer.", ConnectionError("boom"))
    await tutor.send("First question")
    assert await tutor.send("Second question") is None

    assert len(tutor.history) == 2
    assert tutor.notice.title == "An error occurred."
    assert isinstance(tutor.last_error, ModelServiceError)
    assert tutor.is_loading is False


@pytest.mark.asyncio
@pytest.mark.parametrize("query", ["", "   ", None])
async def test_empty_query_never_calls_the_flow(tutor, fake_model, query):
    with pytest.raises(FormError) as excinfo:
        await tutor.send(query)
    assert excinfo.value.message == "Please enter a question."
    assert fake_model.requests == []
    assert len(tutor.history) == 0


@pytest.mark.asyncio
async def test_tutor_requires_a_subject(executor, reference_data, fake_model):
    session = TutorSession(executor, reference_data.tutor_subjects)
    with pytest.raises(FormError, match="select a subject"):
        await session.send("What is a derivative?")
    assert session.notice is not None
    assert fake_model.requests == []


@pytest.mark.asyncio
async def test_switching_subject_clears_history(tutor, fake_model):
    fake_model.queue("answer")
    await tutor.send("question")
    tutor.select_subject("History")
    assert len(tutor.history) == 0
    assert tutor.subject == "History"


def test_unknown_subject_is_rejected(tutor):
    with pytest.raises(FormError):
        tutor.select_subject("Alchemy")
    assert tutor.subject == "Physics"


@pytest.mark.asyncio
async def test_wellness_query_message(executor):
    session = WellnessSession(executor)
    with pytest.raises(FormError, match="Please enter a message."):
        await session.send("")


@pytest.mark.asyncio
async def test_breathing_exercise(executor, fake_speech, fake_model):
    session = WellnessSession(executor)
    audio = await session.request_breathing_exercise()

    assert audio.startswith("data:audio/wav;base64,")
    assert session.audio == audio
    assert fake_speech.texts == [BREATHING_EXERCISE_TEXT]
    assert session.history.to_list() == [
        {"role": "user", "content": BREATHING_REQUEST},
        {"role": "model", "content": BREATHING_ACK},
    ]
    assert fake_model.requests == []
    assert session.is_synthesizing is False


@pytest.mark.asyncio
async def test_breathing_exercise_failure_rolls_back_both_turns(make_executor, fake_model):
    executor = make_executor(speech=FakeSpeechClient(audio=RuntimeError("tts down")))
    session = WellnessSession(executor)
    fake_model.queue("Hi, how are you feeling?")
    await session.send("Hello")

    assert await session.request_breathing_exercise() is None
    assert [turn["content"] for turn in session.history] == ["Hello", "Hi, how are you feeling?"]
    assert session.notice.title == "Audio Error"
    assert session.audio is None


@pytest.mark.asyncio
async def test_campus_guide_sends_no_history(executor, fake_model):
    session = CampusGuideSession(executor)
    fake_model.queue(
        "Ask me about any building.",
        tool_call(GET_LOCATION_INFO, {"locationName": "Main Library"}),
        "The Main Library is open late during finals.",
    )
    await session.send("Hello")
    await session.send("When does the library open?")

    assert len(session.history) == 4
    assert fake_model.requests[1].history == ()
    assert session.last_location["name"] == "Main Library"


class OutOfOrderModel:
    """Answers the second question first, then fails the first one."""

    def __init__(self):
        self.second_answered = asyncio.Event()

    async def generate(self, request):
        if request.prompt == "First question":
            await self.second_answered.wait()
            raise ConnectionError("timed out")
        self.second_answered.set()
        return ModelReply(text="Second answer.")


@pytest.mark.asyncio
async def test_failed_send_rolls_back_only_its_own_turn(make_executor, reference_data):
    tutor = TutorSession(make_executor(model=OutOfOrderModel()), reference_data.tutor_subjects)
    tutor.select_subject("Physics")

    first, second = await asyncio.gather(tutor.send("First question"), tutor.send("Second question"))

    assert first is None
    assert second == "Second answer."
    assert tutor.history.to_list() == [
        {"role": "user", "content": "Second question"},
        {"role": "model", "content": "Second answer."},
    ]


@pytest.mark.asyncio
async def test_breathing_rollback_keeps_turns_added_meanwhile(make_executor, fake_model):
    speech_started = asyncio.Event()
    release = asyncio.Event()

    class SlowFailingSpeech:
        async def synthesize(self, text):
            speech_started.set()
            await release.wait()
            raise RuntimeError("tts down")

    session = WellnessSession(make_executor(speech=SlowFailingSpeech()))
    fake_model.queue("Glad you reached out.")

    async def chat_while_synthesizing():
        await speech_started.wait()
        reply = await session.send("Hello")
        release.set()
        return reply

    audio, reply = await asyncio.gather(session.request_breathing_exercise(), chat_while_synthesizing())

    assert audio is None
    assert reply == "Glad you reached out."
    assert session.history.to_list() == [
        {"role": "user", "content": "Hello"},
        {"role": "model", "content": "Glad you reached out."},
    ]


# Course reviews


@pytest.fixture()
def reviews_screen(executor, reference_data):
    return CourseReviewsScreen(executor, reference_data)


def test_submit_review_prepends_to_selected_course(reviews_screen, reference_data):
    reviews_screen.select_course("hist101")
    review = reviews_screen.submit_review(4, "Loved the essays and the discussions.")

    assert review.author == "Alex Doe (You)"
    assert review.rating == 4
    reviews = reviews_screen.course_reviews()
    assert reviews[0] == review
    assert len(reviews) == 2
    assert len(reference_data.get_course("hist101").reviews) == 1


@pytest.mark.parametrize(
    "rating, comment, message",
    [
        (None, "A long enough comment.", "Please select a rating."),
        (0, "A long enough comment.", "Please select a rating."),
        (5, "Too short", "Comment must be at least 10 characters."),
    ],
)
def test_submit_review_validation(reviews_screen, rating, comment, message):
    with pytest.raises(FormError) as excinfo:
        reviews_screen.submit_review(rating, comment)
    assert excinfo.value.message == message
    assert len(reviews_screen.course_reviews("cs101")) == 3


def test_select_unknown_course(reviews_screen):
    with pytest.raises(FormError):
        reviews_screen.select_course("zz999")
    assert reviews_screen.selected.id == "cs101"


@pytest.mark.asyncio
async def test_summary_needs_two_reviews(reviews_screen, fake_model):
    reviews_screen.select_course("hist101")
    with pytest.raises(FormError, match="Need at least 2 reviews"):
        await reviews_screen.generate_summary()
    assert fake_model.requests == []

    reviews_screen.submit_review(5, "The essay feedback was detailed.")
    fake_model.queue(json.dumps({"summary": "Students praise the essays."}))
    assert await reviews_screen.generate_summary() == "Students praise the essays."
    assert '- "The essay feedback was detailed."' in fake_model.requests[0].prompt


@pytest.mark.asyncio
async def test_summary_failure_sets_notice(reviews_screen, fake_model):
    fake_model.queue("not json at all")
    assert await reviews_screen.generate_summary() is None
    assert reviews_screen.notice.title == "Error generating summary"
    assert isinstance(reviews_screen.last_error, MalformedModelOutput)
    assert reviews_screen.summary is None


@pytest.mark.asyncio
async def test_actions_on_another_course_leave_the_selection_alone(reviews_screen, fake_model):
    reviews_screen.submit_review(5, "The essay feedback was detailed.", course_id="hist101")
    fake_model.queue(json.dumps({"summary": "Essays are the highlight."}))

    assert await reviews_screen.generate_summary("hist101") == "Essays are the highlight."
    assert reviews_screen.selected.id == "cs101"
    assert reviews_screen.summary is None
    assert reviews_screen.summaries["hist101"] == "Essays are the highlight."
    assert len(reviews_screen.course_reviews("cs101")) == 3


class CourseEchoModel:
    """Replies with a summary naming the course from the prompt, after yielding once."""

    def __init__(self):
        self.prompts = []

    async def generate(self, request):
        self.prompts.append(request.prompt)
        await asyncio.sleep(0)
        course = request.prompt.split("Course Name: ", 1)[1].split("\n", 1)[0]
        return ModelReply(text=json.dumps({"summary": f"About {course}."}))


@pytest.mark.asyncio
async def test_concurrent_summaries_use_their_own_course(make_executor, reference_data):
    screen = CourseReviewsScreen(make_executor(model=CourseEchoModel()), reference_data)
    cs, phys = await asyncio.gather(screen.generate_summary("cs101"), screen.generate_summary("phys201"))
    assert cs == "About Introduction to Computer Science."
    assert phys == "About Classical Mechanics."


# Study buddies


def test_study_buddy_payload_excludes_current_user(executor, reference_data):
    finder = StudyBuddyFinder(executor, reference_data)
    payload = finder.build_payload(["CS101"], "Quiet")
    assert payload["currentUser"]["name"] == "Alex Doe"
    assert payload["currentUser"]["courses"] == ["CS101"]
    assert payload["currentUser"]["studyStyle"] == "Quiet"
    names = [buddy["name"] for buddy in payload["potentialBuddies"]]
    assert "Alex Doe" not in names
    assert len(names) == len(reference_data.students) - 1


@pytest.mark.parametrize(
    "courses, style, message",
    [
        ([], "Quiet", "You have to select at least one course."),
        (["CS999"], "Quiet", "You have to select at least one course."),
        (["CS101"], "Loud", "Please select a study style."),
    ],
)
def test_study_buddy_form_validation(executor, reference_data, courses, style, message):
    finder = StudyBuddyFinder(executor, reference_data)
    with pytest.raises(FormError) as excinfo:
        finder.build_payload(courses, style)
    assert excinfo.value.message == message


@pytest.mark.asyncio
async def test_find_matches(executor, reference_data, fake_model):
    finder = StudyBuddyFinder(executor, reference_data)
    assert finder.defaults() == {"courses": ["CS101", "MATH300", "PHYS201"], "studyStyle": "Focused"}
    fake_model.queue(
        json.dumps(
            {"matches": [{"name": "Priya Patel", "similarityScore": 90, "reason": "Same courses.", "matchedCourses": ["CS101"]}]}
        )
    )
    matches = await finder.find_matches(["CS101"], "Focused")
    assert matches[0]["name"] == "Priya Patel"
    assert finder.is_loading is False


# Recommendations


def test_split_list():
    assert split_list(" Coding Crew, , Debate Club ,") == ["Coding Crew", "Debate Club"]
    assert split_list("") == []
    assert split_list(None) == []


@pytest.mark.asyncio
async def test_recommendations(executor, reference_data, fake_model):
    form = RecommendationsForm(executor, reference_data)
    fake_model.queue(
        json.dumps({"recommendedGroups": "Coding Crew, Debate Club", "recommendedActivities": "Hackathon"})
    )
    result = await form.submit("I like coding and debating")
    assert result.to_dict() == {"groups": ["Coding Crew", "Debate Club"], "activities": ["Hackathon"]}
    prompt = fake_model.requests[0].prompt
    assert "Available Campus Groups: Debate Club, Coding Crew" in prompt
    assert "Available Campus Activities: Hackathon, Art Exhibition" in prompt


@pytest.mark.asyncio
async def test_recommendations_need_more_detail(executor, reference_data, fake_model):
    form = RecommendationsForm(executor, reference_data)
    with pytest.raises(FormError, match="tell us a bit more"):
        await form.submit("  art  ")
    assert fake_model.requests == []


@pytest.mark.asyncio
async def test_invalid_flow_input_surfaces_as_failure(executor, fake_model):
    session = CampusGuideSession(executor)
    session.build_payload = lambda query, prior: {"question": query}
    assert await session.send("Where is the gym?") is None
    assert isinstance(session.last_error, InvalidInput)
    assert fake_model.requests == []
