"""Unit tests for the pure conversation and escalation transitions."""

import pytest

from companion.state import (
    BANK_REPLY_CLICKS,
    FAREWELL_CLICK,
    WARNING_CLICK,
    ClickOutcome,
    ConversationState,
    EscalationState,
    Message,
    Phase,
    Sender,
    append_message,
    begin_typing,
    complete_departure,
    end_typing,
    next_message_id,
    register_click,
    set_typing,
)


# ---------------------------------------------------------------------------
# Conversation transitions
# ---------------------------------------------------------------------------

@pytest.mark.unit
def test_append_returns_new_state_and_leaves_old_one_alone():
    """
    Story: Appending a message gives back a new state with the message at the
    end. The state we started from still has an empty log, so a snapshot an
    observer kept earlier never changes under it.
    """
    before = ConversationState()
    after = append_message(before, Message(id=1, text="hello", sender=Sender.USER))

    assert before.messages == ()
    assert [m.text for m in after.messages] == ["hello"]


@pytest.mark.unit
def test_append_refuses_ids_that_do_not_increase():
    """
    Story: The log is visited in ascending id order, so a message whose id is
    not greater than the last one would break that order. It is refused.
    """
    state = append_message(ConversationState(), Message(id=10, text="a", sender=Sender.USER))

    with pytest.raises(ValueError):
        append_message(state, Message(id=10, text="b", sender=Sender.ASSISTANT))


@pytest.mark.unit
def test_next_message_id_is_time_derived_but_strictly_increasing():
    """
    Story: Ids come from the clock in milliseconds. Two messages created in the
    same millisecond (a reply landing right after its submission) still get
    different, increasing ids.
    """
    state = ConversationState()
    assert next_message_id(state, 5000) == 5000

    state = append_message(state, Message(id=5000, text="a", sender=Sender.USER))
    assert next_message_id(state, 5000) == 5001
    assert next_message_id(state, 4000) == 5001
    assert next_message_id(state, 6000) == 6000


@pytest.mark.unit
def test_shared_flag_is_last_writer_wins():
    state = set_typing(ConversationState(), True)
    assert state.typing_indicator_visible is True
    assert set_typing(state, False).typing_indicator_visible is False


@pytest.mark.unit
def test_per_cycle_counter_hides_only_when_no_cycle_is_typing():
    """
    Story: Two cycles start typing, one finishes. With the per-cycle counter
    the indicator stays visible until the second one finishes too.
    """
    state = begin_typing(begin_typing(ConversationState()))
    state = end_typing(state)
    assert state.typing_indicator_visible is True
    assert state.typing_cycles == 1

    state = end_typing(state)
    assert state.typing_indicator_visible is False
    assert state.typing_cycles == 0


@pytest.mark.unit
def test_end_typing_never_goes_negative():
    state = end_typing(ConversationState())
    assert state.typing_cycles == 0
    assert state.typing_indicator_visible is False


@pytest.mark.unit
def test_conversation_state_serializes_to_plain_data():
    state = append_message(ConversationState(), Message(id=1, text="hi", sender=Sender.USER))
    assert state.to_dict() == {
        "messages": [{"id": 1, "text": "hi", "sender": "user"}],
        "typing_indicator_visible": False,
        "typing_cycles": 0,
    }


# ---------------------------------------------------------------------------
# Escalation transitions
# ---------------------------------------------------------------------------

def _click_n(n: int) -> tuple[EscalationState, list[ClickOutcome]]:
    state = EscalationState()
    outcomes = []
    for _ in range(n):
        state, outcome = register_click(state)
        outcomes.append(outcome)
    return state, outcomes


@pytest.mark.unit
def test_first_eight_clicks_ask_for_bank_replies():
    state, outcomes = _click_n(BANK_REPLY_CLICKS)
    assert outcomes == [ClickOutcome.BANK_REPLY] * 8
    assert state == EscalationState(click_count=8, phase=Phase.PRESENT)


@pytest.mark.unit
def test_ninth_click_warns_and_tenth_says_farewell():
    state, outcomes = _click_n(WARNING_CLICK)
    assert outcomes[-1] is ClickOutcome.WARNING
    assert state.phase is Phase.WARNED

    state, outcome = register_click(state)
    assert outcome is ClickOutcome.FAREWELL
    assert state == EscalationState(click_count=FAREWELL_CLICK, phase=Phase.LEAVING)


@pytest.mark.unit
@pytest.mark.parametrize("phase", [Phase.LEAVING, Phase.LEFT])
def test_clicks_after_the_farewell_change_nothing(phase):
    state = EscalationState(click_count=10, phase=phase)
    new_state, outcome = register_click(state)
    assert outcome is ClickOutcome.IGNORED
    assert new_state is state


@pytest.mark.unit
def test_departure_only_moves_leaving_forward():
    """
    Story: Completing the departure turns Leaving into Left. Applied to any
    other phase it changes nothing, so the phase can never move backwards.
    """
    assert complete_departure(EscalationState(10, Phase.LEAVING)).phase is Phase.LEFT
    for phase in (Phase.PRESENT, Phase.WARNED, Phase.LEFT):
        state = EscalationState(3, phase)
        assert complete_departure(state) is state


@pytest.mark.unit
def test_escalation_state_serializes_to_plain_data():
    assert EscalationState(9, Phase.WARNED).to_dict() == {"click_count": 9, "phase": "warned"}
