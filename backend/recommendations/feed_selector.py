"""
Orders scored candidates and cuts one page out of them.
"""
from typing import List, Sequence
from recommendations.dtos import FeedPage, ScoredMoment


def order_scored(scored: Sequence[ScoredMoment]) -> List[ScoredMoment]:
    """
    Highest score first. Equal scores fall back to the moment id (ascending
    string form) so repeated calls on the same snapshot paginate identically.
    """
    return sorted(scored, key=lambda s: (-s.final_score, str(s.moment_id)))


def select_page(scored: Sequence[ScoredMoment], limit: int, offset: int = 0) -> FeedPage:
    """
    Returns the ids in [offset, offset + limit) of the ordered candidates.

    An empty candidate list, a non-positive limit or an offset past the end
    all give an empty page; total is always the full candidate count.
    """
    total = len(scored)
    offset = max(offset, 0)

    if total == 0 or limit <= 0 or offset >= total:
        return FeedPage(ids=[], total=total, offset=offset)

    ordered = order_scored(scored)
    return FeedPage(
        ids=[s.moment_id for s in ordered[offset:offset + limit]],
        total=total,
        offset=offset,
    )
