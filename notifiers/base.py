"""Abstract departure-notification contract."""

from abc import ABC, abstractmethod


class DepartureNotifier(ABC):
    """Contract for whoever should hear that the companion walked off.

    notify() runs the side effect (posting to Discord, paging someone) and
    returns a plain-English result string for the logs. It is called once per
    session, off the event loop, and must not raise for expected failures such
    as a rejected webhook; return a failure description instead.
    """

    @abstractmethod
    def notify(self, summary: str) -> str:
        """Send the notification and return a human-readable result."""
        ...
