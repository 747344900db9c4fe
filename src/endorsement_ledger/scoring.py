"""Reputation scoring."""

from typing import Iterable, Mapping

from endorsement_ledger.models import Endorsement


def weighted_score(
    endorsement_ids: Iterable[int], endorsements: Mapping[int, Endorsement]
) -> int:
    """Sum weight * stake over the active endorsements among the given ids.

    Verification status does not affect the result, and the sum is not
    normalized.
    """
    score = 0
    for endorsement_id in endorsement_ids:
        endorsement = endorsements.get(endorsement_id)
        if endorsement is not None:
            score += endorsement.contribution
    return score
