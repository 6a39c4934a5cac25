"""Conversation and escalation state, plus the pure transitions between states.

Both state structs are frozen: every transition returns a new value and leaves
the old one untouched, so a snapshot handed to an observer never changes under
it. The stateful classes (MessageStore, ClickEscalationController) are thin
owners around these functions.
"""

from dataclasses import asdict, dataclass, replace
from enum import Enum

# Clicks answered from the response bank before the warning.
BANK_REPLY_CLICKS = 8
WARNING_CLICK = BANK_REPLY_CLICKS + 1
FAREWELL_CLICK = WARNING_CLICK + 1


class Sender(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Phase(str, Enum):
    PRESENT = "present"
    WARNED = "warned"
    LEAVING = "leaving"
    LEFT = "left"


class ClickOutcome(str, Enum):
    """What a single click asks the controller to do."""

    IGNORED = "ignored"
    BANK_REPLY = "bank_reply"
    WARNING = "warning"
    FAREWELL = "farewell"


@dataclass(frozen=True)
class Message:
    id: int
    text: str
    sender: Sender

    def to_dict(self) -> dict:
        return {"id": self.id, "text": self.text, "sender": self.sender.value}


@dataclass(frozen=True)
class ConversationState:
    messages: tuple[Message, ...] = ()
    typing_indicator_visible: bool = False
    # Only meaningful when the indicator is driven per cycle.
    typing_cycles: int = 0

    @property
    def last_id(self) -> int:
        return self.messages[-1].id if self.messages else 0

    def to_dict(self) -> dict:
        return {
            "messages": [m.to_dict() for m in self.messages],
            "typing_indicator_visible": self.typing_indicator_visible,
            "typing_cycles": self.typing_cycles,
        }


@dataclass(frozen=True)
class EscalationState:
    click_count: int = 0
    phase: Phase = Phase.PRESENT

    @property
    def accepts_clicks(self) -> bool:
        return self.phase in (Phase.PRESENT, Phase.WARNED)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["phase"] = self.phase.value
        return data


# ---------------------------------------------------------------------------
# Conversation transitions
# ---------------------------------------------------------------------------

def append_message(state: ConversationState, message: Message) -> ConversationState:
    """Return a new state with message at the end of the log.

    Ids must keep increasing; the caller is responsible for minting them (see
    next_message_id).
    """
    if message.id <= state.last_id:
        raise ValueError(
            f"Message id {message.id} does not follow last id {state.last_id}"
        )
    return replace(state, messages=state.messages + (message,))


def next_message_id(state: ConversationState, now_ms: int) -> int:
    """Time-derived id that is still strictly greater than the last one."""
    return max(now_ms, state.last_id + 1)


def set_typing(state: ConversationState, visible: bool) -> ConversationState:
    """Shared-flag semantics: the last writer wins."""
    return replace(state, typing_indicator_visible=visible)


def begin_typing(state: ConversationState) -> ConversationState:
    """Per-cycle semantics: one more cycle is typing."""
    cycles = state.typing_cycles + 1
    return replace(state, typing_cycles=cycles, typing_indicator_visible=True)


def end_typing(state: ConversationState) -> ConversationState:
    """Per-cycle semantics: one cycle stopped typing; hide when none remain."""
    cycles = max(state.typing_cycles - 1, 0)
    return replace(state, typing_cycles=cycles, typing_indicator_visible=cycles > 0)


# ---------------------------------------------------------------------------
# Escalation transitions
# ---------------------------------------------------------------------------

def register_click(state: EscalationState) -> tuple[EscalationState, ClickOutcome]:
    """Apply one click to the escalation state.

    Returns the new state and the outcome the controller should act on. Clicks
    after the farewell are ignored and return the state unchanged.
    """
    if not state.accepts_clicks:
        return state, ClickOutcome.IGNORED

    count = state.click_count + 1
    if count <= BANK_REPLY_CLICKS:
        return replace(state, click_count=count), ClickOutcome.BANK_REPLY
    if count == WARNING_CLICK:
        return EscalationState(click_count=count, phase=Phase.WARNED), ClickOutcome.WARNING
    return EscalationState(click_count=count, phase=Phase.LEAVING), ClickOutcome.FAREWELL


def complete_departure(state: EscalationState) -> EscalationState:
    """Leaving -> Left. Any other phase is returned as is; phases never go back."""
    if state.phase is Phase.LEAVING:
        return replace(state, phase=Phase.LEFT)
    return state
