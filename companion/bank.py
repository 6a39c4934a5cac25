"""Canned replies used when the user pokes the companion directly.

The bank is a JSON list of objects with a "text" field, read once at startup:

    [{"text": "No."}, {"text": "Still no."}]
"""

import json
import logging
import random
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_BANK_PATH = Path(__file__).parent / "data" / "responses.json"


@dataclass(frozen=True)
class BankEntry:
    text: str


@dataclass(frozen=True)
class ResponseBank:
    responses: tuple[BankEntry, ...]

    def __len__(self) -> int:
        return len(self.responses)

    def __contains__(self, text: object) -> bool:
        return any(entry.text == text for entry in self.responses)

    def choose(self, rng: random.Random) -> BankEntry:
        """Pick one entry uniformly at random using the given source."""
        return self.responses[rng.randrange(len(self.responses))]


def load_response_bank(path: str | Path | None = None) -> ResponseBank:
    """Read the bank from disk.

    Raises ValueError when the document is not a list, an entry has no usable
    text, or nothing is left to choose from.
    """
    bank_path = Path(path) if path else DEFAULT_BANK_PATH
    with open(bank_path, encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, list):
        raise ValueError(f"Response bank {bank_path} must be a JSON list")

    entries = []
    for i, item in enumerate(raw):
        text = item.get("text") if isinstance(item, dict) else None
        if not isinstance(text, str) or not text.strip():
            raise ValueError(f"Response bank {bank_path}: entry {i} has no text")
        entries.append(BankEntry(text=text))

    if not entries:
        raise ValueError(f"Response bank {bank_path} is empty")

    logger.info("Loaded %d canned responses from %s", len(entries), bank_path)
    return ResponseBank(responses=tuple(entries))
