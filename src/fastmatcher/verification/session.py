"""
Review session over matched records.

The session walks an ordered list of match records with a cursor and keeps
accepted/rejected counters in step with the records' decisions. Decisions
and navigation are separate calls so any front end (keyboard, buttons) can
drive it without repeating the counter logic.

The session assumes a single operator; callers sharing one across threads
must serialize access themselves.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from fastmatcher.exceptions import NoCurrentRecord
from fastmatcher.models import MatchRecord, Verification
from fastmatcher.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class SessionProgress:
    """
    Snapshot of review progress for display.

    Attributes:
        index: Cursor position, -1 before the first record.
        size: Number of records in the session.
        accepted: Number of accepted records.
        rejected: Number of rejected records.
    """

    index: int
    size: int
    accepted: int
    rejected: int

    @property
    def label(self) -> str:
        """Position as "current/size", empty before the session started."""
        if self.index < 0:
            return ""
        return f"{self.index + 1}/{self.size}"

    @property
    def undecided(self) -> int:
        """Records without a decision."""
        return self.size - self.accepted - self.rejected


class VerificationSession:
    """
    Cursor-driven accept/reject workflow over matched records.

    States:
        not started: cursor is -1, current is None.
        positioned: cursor in [0, size - 1].

    Moving past either end returns None and keeps the cursor where it is.
    """

    def __init__(self, records: Iterable[MatchRecord]) -> None:
        """
        Initialize session.

        Args:
            records: Matched records in review order.

        Raises:
            ValueError: If a record has no feature.
        """
        self._records: list[MatchRecord] = list(records)
        unmatched = [r.element_index for r in self._records if not r.is_matched]
        if unmatched:
            msg = f"Session records must be matched, unmatched elements: {unmatched[:5]}"
            raise ValueError(msg)

        self._cursor = -1
        # Records may arrive with decisions already set
        self._accepted = sum(
            1 for r in self._records if r.verification is Verification.ACCEPTED
        )
        self._rejected = sum(
            1 for r in self._records if r.verification is Verification.REJECTED
        )

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> list[MatchRecord]:
        """All session records in review order."""
        return list(self._records)

    @property
    def size(self) -> int:
        """Number of records in the session."""
        return len(self._records)

    @property
    def current_index(self) -> int:
        """Cursor position, -1 before the session started."""
        return self._cursor

    @property
    def current(self) -> MatchRecord | None:
        """Record under the cursor, or None before the session started."""
        if self._cursor < 0:
            return None
        return self._records[self._cursor]

    @property
    def accepted_count(self) -> int:
        """Number of accepted records."""
        return self._accepted

    @property
    def rejected_count(self) -> int:
        """Number of rejected records."""
        return self._rejected

    def advance(self) -> MatchRecord | None:
        """Move to the next record; None (cursor unchanged) at the last one."""
        if self._cursor + 1 >= len(self._records):
            return None
        self._cursor += 1
        return self.current

    def retreat(self) -> MatchRecord | None:
        """Move to the previous record; None (cursor unchanged) at the first one."""
        if self._cursor - 1 < 0:
            return None
        self._cursor -= 1
        return self.current

    def mark_accepted(self, *, advance: bool = True) -> MatchRecord | None:
        """
        Accept the current record.

        Args:
            advance: Move to the next record afterwards.

        Returns:
            The record current after the call.

        Raises:
            NoCurrentRecord: If the session has not started.
        """
        return self._decide(Verification.ACCEPTED, advance=advance)

    def mark_rejected(self, *, advance: bool = True) -> MatchRecord | None:
        """
        Reject the current record.

        Args:
            advance: Move to the next record afterwards.

        Returns:
            The record current after the call.

        Raises:
            NoCurrentRecord: If the session has not started.
        """
        return self._decide(Verification.REJECTED, advance=advance)

    def _decide(self, decision: Verification, *, advance: bool) -> MatchRecord | None:
        record = self.current
        if record is None:
            msg = "Session not started, call advance() first"
            raise NoCurrentRecord(msg)

        previous = record.verification
        if previous is not decision:
            if previous is Verification.ACCEPTED:
                self._accepted -= 1
            elif previous is Verification.REJECTED:
                self._rejected -= 1

            if decision is Verification.ACCEPTED:
                self._accepted += 1
            else:
                self._rejected += 1

            record.verification = decision

        log.debug(
            "Recorded decision",
            index=self._cursor,
            element_index=record.element_index,
            previous=previous.value,
            decision=decision.value,
        )

        if advance:
            self.advance()

        return self.current

    def accepted(self) -> list[MatchRecord]:
        """Accepted records in session order."""
        return [r for r in self._records if r.verification is Verification.ACCEPTED]

    def rejected(self) -> list[MatchRecord]:
        """Rejected records in session order."""
        return [r for r in self._records if r.verification is Verification.REJECTED]

    def progress(self) -> SessionProgress:
        """Snapshot of cursor and counters."""
        return SessionProgress(
            index=self._cursor,
            size=len(self._records),
            accepted=self._accepted,
            rejected=self._rejected,
        )
