"""
Classification of candidate sets into single proposals.

Policy (per element):
- one near, no mid: matched on the near feature
- one near, one or more mid: matched on the near feature, uncertain
- no near, one mid: matched on the mid feature, uncertain
- anything else: unmatched

Ambiguity in the deciding bucket is never resolved by picking the closest
feature; several near candidates leave the element unmatched.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from fastmatcher.exceptions import EmptySession
from fastmatcher.models import CandidateSet, MatchRecord
from fastmatcher.utils.logging import get_logger

log = get_logger(__name__)


@dataclass
class ClassificationSummary:
    """
    Counts of classification outcomes.

    Attributes:
        n_total: Number of classified elements.
        n_likely: Matched without competing candidates.
        n_uncertain: Matched with competing candidates.
        n_unmatched: No proposal.
    """

    n_total: int
    n_likely: int
    n_uncertain: int
    n_unmatched: int

    @staticmethod
    def _percent(value: int, total: int) -> int:
        return round(value * 100 / total) if total else 0

    @property
    def likely_percent(self) -> int:
        """Share of likely matches, rounded to whole percent."""
        return self._percent(self.n_likely, self.n_total)

    @property
    def uncertain_percent(self) -> int:
        """Share of uncertain matches, rounded to whole percent."""
        return self._percent(self.n_uncertain, self.n_total)

    @property
    def unmatched_percent(self) -> int:
        """Share of unmatched elements, rounded to whole percent."""
        return self._percent(self.n_unmatched, self.n_total)


def classify(element_index: int, candidates: CandidateSet) -> MatchRecord:
    """
    Turn one candidate set into a match record.

    Args:
        element_index: Index of the element the candidates belong to.
        candidates: Near/mid candidate set.

    Returns:
        MatchRecord with feature_index None when unmatched.
    """
    n_near = len(candidates.near)
    n_mid = len(candidates.mid)

    if n_near == 1:
        return MatchRecord(
            element_index=element_index,
            feature_index=candidates.near[0],
            candidates=candidates,
            uncertain=n_mid > 0,
        )

    if n_near == 0 and n_mid == 1:
        return MatchRecord(
            element_index=element_index,
            feature_index=candidates.mid[0],
            candidates=candidates,
            uncertain=True,
        )

    return MatchRecord(
        element_index=element_index,
        feature_index=None,
        candidates=candidates,
    )


def classify_all(candidate_sets: Sequence[CandidateSet]) -> list[MatchRecord]:
    """Classify every candidate set, keeping element order."""
    records = [
        classify(index, candidates) for index, candidates in enumerate(candidate_sets)
    ]
    summary = summarize(records)
    log.info(
        "Classified candidates",
        n_total=summary.n_total,
        n_likely=summary.n_likely,
        n_uncertain=summary.n_uncertain,
        n_unmatched=summary.n_unmatched,
    )
    return records


def summarize(records: Iterable[MatchRecord]) -> ClassificationSummary:
    """Count likely, uncertain and unmatched records."""
    n_total = n_likely = n_uncertain = 0
    for record in records:
        n_total += 1
        if not record.is_matched:
            continue
        if record.uncertain:
            n_uncertain += 1
        else:
            n_likely += 1

    return ClassificationSummary(
        n_total=n_total,
        n_likely=n_likely,
        n_uncertain=n_uncertain,
        n_unmatched=n_total - n_likely - n_uncertain,
    )


def order_for_review(records: Iterable[MatchRecord]) -> list[MatchRecord]:
    """
    Matched records in review order: certain first, then uncertain.

    The sort is stable, so element order is kept within each group.

    Raises:
        EmptySession: If no record is matched.
    """
    matched = [record for record in records if record.is_matched]
    if not matched:
        msg = "No element was matched to a feature"
        raise EmptySession(msg)
    return sorted(matched, key=lambda record: record.uncertain)
