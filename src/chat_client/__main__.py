"""Entrypoint: python -m chat_client [CHAT_ID]

Opens a session with ``CHAT_ACCESS_TOKEN`` and logs conversation activity
until interrupted.
"""
from __future__ import annotations

import argparse
import asyncio
import logging

from chat_client.app import ChatApp
from chat_client.application.exceptions import AppError
from chat_client.application.state import ChatState
from chat_client.config import settings

logger = logging.getLogger("chat_client")


def _log_connection(state: ChatState) -> None:
    if state.connection_error:
        logger.info("connection: %s (%s)", state.connection_state, state.connection_error)
    else:
        logger.info("connection: %s", state.connection_state)


def _log_conversations(state: ChatState) -> None:
    for conv in state.conversations:
        preview = conv.last_message.display_content if conv.last_message else ""
        logger.info("[%s] %s (%s) %s", conv.id, conv.display_name, conv.kind, preview)


def _log_active(state: ChatState) -> None:
    chat_id = state.active_conversation_id
    if chat_id is None:
        return
    messages = state.messages_for(chat_id)
    if messages:
        last = messages[-1]
        sender = last.sender.display_name or last.sender.email or last.sender_id
        logger.info("%s: %s", sender, last.display_content)


async def run(chat_id: str | None) -> None:
    if not settings.CHAT_ACCESS_TOKEN:
        raise SystemExit("CHAT_ACCESS_TOKEN is not set")

    app = ChatApp(settings)
    try:
        session = await app.login(settings.CHAT_ACCESS_TOKEN)
        view = session.view
        view.watch(_log_connection, "connection_state", "connection_error")
        view.watch(_log_conversations, "conversations")
        view.watch(_log_active, "messages")
        if chat_id is not None:
            try:
                await view.select_conversation(chat_id)
            except AppError as exc:
                logger.error("Could not open chat %s: %s", chat_id, exc.detail)
        await asyncio.Event().wait()
    finally:
        await app.aclose()


def main() -> None:
    parser = argparse.ArgumentParser(prog="chat_client")
    parser.add_argument("chat_id", nargs="?", help="conversation to open and follow")
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        asyncio.run(run(args.chat_id))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
