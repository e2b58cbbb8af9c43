# Role: Local developer CLI to chat with ChatFlow without the HTTP API.
# Useful for trying prompts and seeing ranking / budget debug output in the terminal.

from __future__ import annotations
import uuid

import qbjs_chat.config
qbjs_chat.config.load_env()

from qbjs_chat.core.chat_flow import ChatFlow


def _new_session_id() -> str:
    return str(uuid.uuid4())


def main() -> None:
    # 1) Create ChatFlow
    # 2) Maintain a session_id across turns
    # 3) Route user input -> ChatFlow -> print generated code (or the error)
    print("QBJS Code Chat CLI")
    print("Commands: /new (new session), /session (show session_id), /clear, /search <text>, /exit")
    print("-" * 50)

    flow = ChatFlow()
    session_id = _new_session_id()
    print(f"session_id: {session_id}")
    print(f"examples loaded: {len(flow.corpus)}")

    while True:
        try:
            user_message = input("\nYou: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            return

        if not user_message:
            continue

        cmd = user_message.lower()

        if cmd in {"/exit", "exit", "quit", "/quit"}:
            print("Bye!")
            return

        if cmd in {"/new", "new"}:
            session_id = _new_session_id()
            print(f"New session_id: {session_id}")
            continue

        if cmd in {"/session", "session"}:
            print(f"session_id: {session_id}")
            continue

        if cmd == "/clear":
            flow.transcripts.clear(session_id)
            print("Transcript cleared.")
            continue

        if cmd.startswith("/search"):
            query = user_message[len("/search") :].strip()
            for scored in flow.search_examples(query):
                print(f"  {scored.score:6.3f}  {scored.example.description}")
            continue

        result = flow.handle_turn(session_id, user_message)
        if result.ok:
            print(f"\nCode:\n{result.code}")
        else:
            print(f"\nError: {result.error}")


if __name__ == "__main__":
    main()
