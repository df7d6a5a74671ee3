"""Line-oriented record state machine shared by the statement adapters.

Every line-based adapter follows the same lifecycle::

    IDLE -> AWAITING_<field> ... -> flush -> IDLE

An anchor line (usually a date) always flushes whatever is buffered before a
new record starts. Anchor flushes only emit complete records; the flush at
end of input is allowed to emit a partial record, leaving missing fields
blank for manual review. Subclasses implement :meth:`feed` (transitions) and
:meth:`build` (turning a buffer into a candidate, or ``None`` to drop it).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum, auto

from ..config import ImportConfig
from ..models import ImportedTransaction
from .utils import normalize_newlines


class ParserState(Enum):
    IDLE = auto()
    AWAITING_TIME = auto()
    AWAITING_VALUE = auto()
    # Value captured; further lines only extend the description.
    AWAITING_ANCHOR = auto()


@dataclass(slots=True)
class RecordBuffer:
    date: str = ""
    time: str = ""
    description: list[str] = field(default_factory=list)
    value: str = ""

    @property
    def text(self) -> str:
        return " ".join(self.description).strip()


class LineStateMachine(ABC):
    def __init__(
        self,
        mappings: Mapping[str, str] | None = None,
        *,
        config: ImportConfig | None = None,
    ) -> None:
        self.mappings = mappings
        self.config = config or ImportConfig()
        self.state = ParserState.IDLE
        self.buffer: RecordBuffer | None = None
        self.results: list[ImportedTransaction] = []

    def run(self, text: str) -> list[ImportedTransaction]:
        for line in normalize_newlines(text).split("\n"):
            self.feed(line.strip())
        self.finish()
        return self.results

    def start(self, state: ParserState, **fields: str) -> RecordBuffer:
        """Flush the current record and open a new buffer in ``state``."""

        self.flush(partial=False)
        self.buffer = RecordBuffer(**fields)
        self.state = state
        return self.buffer

    def flush(self, *, partial: bool) -> None:
        buf, self.buffer = self.buffer, None
        self.state = ParserState.IDLE
        if buf is None:
            return
        record = self.build(buf, partial=partial)
        if record is not None:
            self.results.append(record)

    def finish(self) -> None:
        self.flush(partial=True)

    @abstractmethod
    def feed(self, line: str) -> None: ...

    @abstractmethod
    def build(self, buf: RecordBuffer, *, partial: bool) -> ImportedTransaction | None: ...


__all__ = ["LineStateMachine", "ParserState", "RecordBuffer"]
