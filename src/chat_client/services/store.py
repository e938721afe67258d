"""Single source of truth for conversations, messages and connection status."""
from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable
from typing import Any, Callable

from chat_client.application.state import ChatState
from chat_client.domain.entities.conversation import Conversation
from chat_client.domain.entities.message import Message
from chat_client.domain.value_objects.enums import ConnectionState
from chat_client.services.reducers import reduce, with_sequence

logger = logging.getLogger(__name__)

StateListener = Callable[[ChatState, ChatState], None]


class ConversationStore:
    """Holds the current :class:`ChatState` and notifies listeners on change.

    Every mutation builds a new snapshot; listeners receive ``(new, old)``
    and are only called when the snapshot actually changed.
    """

    def __init__(self, initial: ChatState | None = None) -> None:
        self._state = initial or ChatState()
        self._listeners: list[StateListener] = []
        self._conversations_generation = 0

    @property
    def state(self) -> ChatState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def has_conversation(self, chat_id: str) -> bool:
        return self._state.conversation(chat_id) is not None

    # inbound events

    def apply(self, event: Any) -> ChatState:
        return self._commit(reduce(self._state, event))

    # conversation list

    def begin_conversations_load(self) -> int:
        """Mark a list fetch as in flight and return its generation.

        Only the most recently begun fetch may install its result or clear
        the loading flag; older ones finishing later are discarded.
        """
        self._conversations_generation += 1
        self._commit(dataclasses.replace(self._state, conversations_loading=True))
        return self._conversations_generation

    def finish_conversations_load(self, generation: int, conversations: Iterable[Conversation]) -> bool:
        if generation != self._conversations_generation:
            logger.debug("Discarding stale conversation list (generation %d)", generation)
            return False
        self._commit(dataclasses.replace(
            self._state, conversations=tuple(conversations), conversations_loading=False,
        ))
        return True

    def fail_conversations_load(self, generation: int) -> None:
        if generation == self._conversations_generation:
            self._commit(dataclasses.replace(self._state, conversations_loading=False))

    # per-conversation history

    def begin_history_load(self, chat_id: str, *, force: bool = False) -> bool:
        """Mark a history fetch as in flight.

        Returns False when a fetch for ``chat_id`` is already running, or when
        its history was already loaded and ``force`` is not set.
        """
        state = self._state
        if chat_id in state.history_loading:
            return False
        if chat_id in state.history_loaded and not force:
            return False
        self._commit(dataclasses.replace(
            state, history_loading=state.history_loading | {chat_id},
        ))
        return True

    def finish_history_load(self, chat_id: str, history: Iterable[Message]) -> None:
        """Install fetched history, keeping live messages that arrived meanwhile."""
        state = self._state
        fetched = tuple(history)
        fetched_ids = {m.id for m in fetched}
        live = tuple(m for m in state.messages.get(chat_id, ()) if m.id not in fetched_ids)
        self._commit(dataclasses.replace(
            state,
            messages=with_sequence(state.messages, chat_id, fetched + live),
            history_loading=state.history_loading - {chat_id},
            history_loaded=state.history_loaded | {chat_id},
        ))

    def fail_history_load(self, chat_id: str) -> None:
        state = self._state
        self._commit(dataclasses.replace(
            state, history_loading=state.history_loading - {chat_id},
        ))

    # selection and connection

    def select(self, chat_id: str | None) -> None:
        self._commit(dataclasses.replace(self._state, active_conversation_id=chat_id))

    def set_connection_state(self, connection_state: ConnectionState, *, error: str | None = None) -> None:
        self._commit(dataclasses.replace(
            self._state, connection_state=connection_state, connection_error=error,
        ))

    def _commit(self, new: ChatState) -> ChatState:
        old = self._state
        if new is old or new == old:
            return old
        self._state = new
        for listener in list(self._listeners):
            try:
                listener(new, old)
            except Exception:
                logger.exception("State listener failed")
        return new
