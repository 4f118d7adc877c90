"""Nudge ranking and truncation"""

from typing import List

from spendwise.domain.models import Nudge


def prioritize_nudges(nudges: List[Nudge], limit: int = 5) -> List[Nudge]:
    """
    Order nudges high -> medium -> low and keep the first ``limit``.

    Within a priority the most recently generated nudge comes first. Nudges
    past the limit are dropped, not deferred.
    """
    ranked = sorted(nudges, key=lambda n: (n.priority.rank, -n.sequence))
    return ranked[:limit]
