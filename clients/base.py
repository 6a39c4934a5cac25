"""Abstract reply-client contract and its failure types."""

import functools
import logging
import time
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class ReplyError(Exception):
    """Base class for anything a reply client can fail with."""


class ReplyFetchFailed(ReplyError):
    """Transport error, timeout, bad status or an undecodable body."""


class ReplyDecodeIncomplete(ReplyError):
    """The payload decoded fine but carries no usable reply field."""


def _truncate(s: str, max_len: int = 200) -> str:
    if not isinstance(s, str):
        s = str(s)
    return s[:max_len] + "..." if len(s) > max_len else s


def log_reply_call(fn):
    """Decorator: log client name, result and duration for every reply call."""
    @functools.wraps(fn)
    async def wrapper(self, *args, **kwargs):
        name = type(self).__name__
        logger.info("Reply call: %s", name)
        start = time.perf_counter()
        try:
            result = await fn(self, *args, **kwargs)
        except ReplyError as e:
            elapsed = time.perf_counter() - start
            logger.warning("%s failed after %.3fs: %s", name, elapsed, e)
            raise
        elapsed = time.perf_counter() - start
        logger.info("%s returned in %.3fs: %s", name, elapsed, _truncate(result))
        return result
    return wrapper


class ReplyClient(ABC):
    """Contract for remote reply generators.

    A client makes exactly one attempt per call and applies its own bounded
    timeout, so a response cycle is never left pending forever. Whatever goes
    wrong must surface as a ReplyError subclass: ReplyFetchFailed when nothing
    usable came back, ReplyDecodeIncomplete when a payload came back without
    the reply field. The caller maps each to its own fallback text.
    """

    @abstractmethod
    async def generate_reply(self) -> str:
        """Fetch one reply and return its text."""
        ...
