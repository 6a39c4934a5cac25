from dataclasses import dataclass
from enum import Enum

DEFAULT_GENERIC_FALLBACK = "reply"
DEFAULT_FAILURE_FALLBACK = "Sorry, I couldn't respond right now."
DEFAULT_WARNING = "Poke me one more time and I'm leaving. I mean it."
DEFAULT_FAREWELL = "That's it. I'm out of here. Good luck with your problem."


class IndicatorMode(str, Enum):
    """How overlapping response cycles drive the typing indicator.

    SHARED: one flag, each cycle sets it on and off regardless of the others.
    PER_CYCLE: visible while at least one cycle is in its typing stage.
    """

    SHARED = "shared"
    PER_CYCLE = "per_cycle"


@dataclass(frozen=True)
class Timings:
    """Delays in milliseconds."""

    read_delay_ms: int = 800
    typing_delay_ms: int = 3000
    exit_delay_ms: int = 1000

    def __post_init__(self) -> None:
        for name in ("read_delay_ms", "typing_delay_ms", "exit_delay_ms"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")

    @property
    def read_delay(self) -> float:
        return self.read_delay_ms / 1000

    @property
    def typing_delay(self) -> float:
        return self.typing_delay_ms / 1000

    @property
    def exit_delay(self) -> float:
        return self.exit_delay_ms / 1000


@dataclass(frozen=True)
class CompanionTexts:
    generic_fallback: str = DEFAULT_GENERIC_FALLBACK
    failure_fallback: str = DEFAULT_FAILURE_FALLBACK
    warning: str = DEFAULT_WARNING
    farewell: str = DEFAULT_FAREWELL

    def __post_init__(self) -> None:
        # These are appended to the log as is, and the log refuses blank text.
        for name in ("generic_fallback", "failure_fallback", "warning", "farewell"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"{name} must be non-empty text")
