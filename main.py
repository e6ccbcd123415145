"""Main CLI entrypoint for the Campus Assistant."""
import asyncio
import os
import argparse

from dotenv import load_dotenv

# Load environment variables from .env file BEFORE importing modules that depend on them
load_dotenv()

from campus_data import load_reference_data
from controllers import CampusGuideSession, FormError, TutorSession, WellnessSession
from flows import FlowExecutor
from shared.chat_logging import enable_chat_logging
from shared.config import Configuration

ASSISTANTS = ("tutor", "wellness", "guide")


def _make_session(name: str, executor: FlowExecutor, data):
    if name == "tutor":
        return TutorSession(executor, data.tutor_subjects)
    if name == "wellness":
        return WellnessSession(executor)
    return CampusGuideSession(executor)


def _print_help(session) -> None:
    print("\nAvailable commands:")
    print("  - quit/exit/q: Exit the chat")
    print("  - reset: Clear conversation history")
    print("  - switch <tutor|wellness|guide>: Change assistant")
    if isinstance(session, TutorSession):
        print("  - subject <name>: Pick the tutoring subject (clears history)")
        print(f"    Subjects: {', '.join(session.subjects)}")
    if isinstance(session, WellnessSession):
        print("  - breathe: Generate the guided breathing exercise audio")
    print("  - help: Show this help message")
    print()


async def main(assistant: str = "guide", enable_logging: bool = False, log_level: str = "info"):
    """Run the interactive chat loop."""
    print("=" * 60)
    print("Campus Assistant")
    print("=" * 60)
    print()
    if enable_logging:
        level = {"debug": 10, "info": 20, "warning": 30, "error": 40}.get(log_level.lower(), 20)
        enable_chat_logging(level=level)
        print(f"Logging enabled at level: {log_level.upper()}")

    # Initialize configuration
    try:
        config = Configuration()
        config.validate()
    except ValueError as e:
        print(f"Configuration error: {e}")
        print("\nPlease ensure:")
        print("1. You have a .env file with OPENAI_API_KEY")
        print("2. You have a model_config.json file (or use defaults)")
        return

    print("Using models:")
    print(f"  - Chat: {config.chat_model}")
    print(f"  - Speech: {config.speech_model} ({config.speech_voice})")
    if getattr(config, "openai_base_url", None):
        print(f"Base URL: {config.openai_base_url}")
    print()

    data = load_reference_data()
    executor = FlowExecutor.from_config(config, data)
    session = _make_session(assistant, executor, data)

    print(f"Chatting with the {assistant} assistant. Type 'quit', 'exit', or 'q' to end.")
    print("Type 'reset' to clear conversation history.")
    print("Type 'help' for usage tips.")
    print("-" * 60)
    print()

    # Chat timeout is configurable via CHAT_TIMEOUT (sec); tool rounds may need several model calls
    chat_timeout_env = os.getenv("CHAT_TIMEOUT")
    if chat_timeout_env and chat_timeout_env.isdigit():
        chat_timeout = int(chat_timeout_env)
    else:
        chat_timeout = max(config.openai_timeout * 2, 60)

    while True:
        try:
            user_input = input("You: ").strip()

            if not user_input:
                continue

            command, _, argument = user_input.partition(" ")
            command = command.lower()

            if command in ['quit', 'exit', 'q']:
                print("\nGoodbye!")
                break

            if command == 'reset':
                session.reset()
                print("Chat history cleared.\n")
                continue

            if command == 'help':
                _print_help(session)
                continue

            if command == 'switch' and argument.strip() in ASSISTANTS:
                assistant = argument.strip()
                session = _make_session(assistant, executor, data)
                print(f"Switched to the {assistant} assistant.\n")
                continue

            if command == 'subject' and isinstance(session, TutorSession):
                session.select_subject(argument.strip())
                print(f"Subject set to {session.subject}. History cleared.\n")
                continue

            if command == 'breathe' and isinstance(session, WellnessSession):
                media = await asyncio.wait_for(session.request_breathing_exercise(), timeout=chat_timeout)
                if media is None:
                    print(f"\n{session.notice.title}: {session.notice.description}\n")
                else:
                    print(f"\nAudio ready ({len(media)} characters of WAV data URI).\n")
                continue

            print("\nAssistant: ", end="", flush=True)
            try:
                response = await asyncio.wait_for(session.send(user_input), timeout=chat_timeout)
            except asyncio.TimeoutError:
                response = (
                    f"Request timed out after {chat_timeout}s. The endpoint may be slow or unreachable. "
                    "Try again, increase CHAT_TIMEOUT/OPENAI_TIMEOUT, or check your OPENAI_BASE_URL and network."
                )
            if response is None:
                response = session.notice.description
            print(response)
            if isinstance(session, CampusGuideSession) and session.last_location:
                loc = session.last_location
                print(f"  [{loc['name']} - {loc['type']} - {loc['hours']}]")
            print()

        except FormError as e:
            print(f"\n{e.message}\n")
        except asyncio.TimeoutError:
            print(f"\nRequest timed out after {chat_timeout}s.\n")
        except KeyboardInterrupt:
            print("\n\nGoodbye!")
            break


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Campus Assistant chat")
    parser.add_argument("--assistant", default="guide", choices=ASSISTANTS, help="Assistant to start with")
    parser.add_argument("--log", action="store_true", help="Enable chat logging to console and logs/chat.log")
    parser.add_argument("--log-level", default="info", choices=["debug", "info", "warning", "error"], help="Logging level when --log is set")
    args = parser.parse_args()
    asyncio.run(main(assistant=args.assistant, enable_logging=args.log, log_level=args.log_level))
