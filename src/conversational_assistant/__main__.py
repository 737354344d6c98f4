"""
Serve the assistant with uvicorn.

Usage:
    OPENAI_API_KEY=... python -m conversational_assistant
    HOST=0.0.0.0 PORT=8080 DATABASE_URL=sqlite+aiosqlite:///chat.db python -m conversational_assistant
"""

import os

import uvicorn

from conversational_assistant.api.app import create_app


def main() -> None:
    uvicorn.run(create_app(), host=os.environ.get("HOST", "127.0.0.1"), port=int(os.environ.get("PORT", "8000")))


if __name__ == "__main__":
    main()
