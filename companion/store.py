import logging
from typing import Callable, Protocol

from companion.errors import SubmissionRejected
from companion.state import (
    ConversationState,
    Message,
    Sender,
    append_message,
    begin_typing,
    end_typing,
    next_message_id,
    set_typing,
)

logger = logging.getLogger(__name__)


class StateObserver(Protocol):
    def __call__(self, state: ConversationState) -> None: ...


class MessageStore:
    """Append-only conversation log plus the typing indicator.

    There is no edit or delete operation. Every change replaces the frozen
    ConversationState and notifies observers with the new value.
    """

    def __init__(self, clock: Callable[[], float]) -> None:
        self._clock = clock
        self._state = ConversationState()
        self._observers: list[StateObserver] = []

    @property
    def state(self) -> ConversationState:
        return self._state

    @property
    def messages(self) -> tuple[Message, ...]:
        return self._state.messages

    def subscribe(self, observer: StateObserver) -> Callable[[], None]:
        """Register an observer; returns a callable that removes it again."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def append(self, text: str, sender: Sender) -> Message:
        """Append one message and return it.

        Raises SubmissionRejected for empty or whitespace-only text, before
        anything is changed.
        """
        if not text or not text.strip():
            raise SubmissionRejected("Message text is empty")
        now_ms = int(self._clock() * 1000)
        message = Message(
            id=next_message_id(self._state, now_ms),
            text=text,
            sender=sender,
        )
        self._commit(append_message(self._state, message))
        logger.debug("Appended %s message id=%d", sender.value, message.id)
        return message

    def set_typing(self, visible: bool) -> None:
        self._commit(set_typing(self._state, visible))

    def begin_typing(self) -> None:
        self._commit(begin_typing(self._state))

    def end_typing(self) -> None:
        self._commit(end_typing(self._state))

    def _commit(self, state: ConversationState) -> None:
        if state == self._state:
            return
        self._state = state
        for observer in list(self._observers):
            try:
                observer(state)
            except Exception:
                logger.exception("State observer %r failed", observer)
