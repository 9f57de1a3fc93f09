"""
Persistence for contributor trust statistics.

Counters are only ever changed with SQL expression updates
(``SET x = x + 1``), so concurrent submissions and reviews from the same
contributor never lose an increment. The derived values (trust level,
approval rate) are then computed from the updated counters with
:func:`.trust_level_for` and :func:`.approval_rate`, in the same transaction.
The counter update has locked the row by then, so the counters read back
cannot change before the derived values are written.
"""

import logging

from sqlalchemy import case, func

from ...domain import ContributorStats
from ...domain.stats import POINTS_FOR_APPROVAL, REJECTION_PENALTY, \
    approval_rate, trust_level_for
from ...domain.submission import EntityKind
from ...domain.util import get_tzaware_utc_now
from . import models
from .exceptions import NoSuchEntity
from .util import current_session

logger = logging.getLogger(__name__)

Stats = models.ContributorStats


def ensure(user_id: int) -> None:
    """Create a zero-value stats row for ``user_id`` if there is none."""
    session = current_session()
    if session.get(Stats, user_id) is not None:
        return
    session.add(Stats(user_id=user_id, created=get_tzaware_utc_now()))
    session.flush()
    logger.debug('Created stats for user %s', user_id)


def on_submit(user_id: int, kind: EntityKind) -> None:
    """Count a new submission of ``kind`` by ``user_id``."""
    now = get_tzaware_utc_now()
    kind_column = Stats.kind_column(kind)
    rows = current_session().query(Stats) \
        .filter(Stats.user_id == user_id) \
        .update({
            Stats.total_submissions: Stats.total_submissions + 1,
            Stats.pending_submissions: Stats.pending_submissions + 1,
            kind_column: kind_column + 1,
            Stats.last_submission_at: now,
            Stats.first_submission_at: func.coalesce(
                Stats.first_submission_at, now
            ),
        }, synchronize_session=False)
    if rows == 0:
        raise NoSuchEntity(f'No stats for user {user_id}; call ensure()')
    logger.debug('Counted %s submission for user %s', kind.value, user_id)


def on_reviewed(user_id: int, approved: bool) -> None:
    """
    Record a review decision on a submission by ``user_id``.

    Approval awards :const:`.POINTS_FOR_APPROVAL` trust points; rejection
    deducts :const:`.REJECTION_PENALTY`, but never below zero.
    """
    session = current_session()
    values = {
        Stats.pending_submissions: case(
            (Stats.pending_submissions > 0, Stats.pending_submissions - 1),
            else_=0
        )
    }
    if approved:
        values[Stats.approved_submissions] = Stats.approved_submissions + 1
        values[Stats.trust_points] = Stats.trust_points + POINTS_FOR_APPROVAL
    else:
        values[Stats.rejected_submissions] = Stats.rejected_submissions + 1
        values[Stats.trust_points] = case(
            (Stats.trust_points > REJECTION_PENALTY,
             Stats.trust_points - REJECTION_PENALTY),
            else_=0
        )
    rows = session.query(Stats) \
        .filter(Stats.user_id == user_id) \
        .update(values, synchronize_session=False)
    if rows == 0:
        raise NoSuchEntity(f'No stats for user {user_id}')

    row = session.get(Stats, user_id, populate_existing=True,
                      with_for_update=True)
    row.trust_level = trust_level_for(row.trust_points).value
    row.approval_rate = approval_rate(row.approved_submissions,
                                      row.rejected_submissions)
    session.flush()
    logger.debug('Recorded %s review for user %s',
                 'approving' if approved else 'rejecting', user_id)


def get_stats(user_id: int) -> ContributorStats:
    """Get stats for ``user_id``; zero-valued if they have none yet."""
    row = current_session().get(Stats, user_id, populate_existing=True)
    if row is None:
        return ContributorStats(user_id=user_id)
    return row.to_stats()
