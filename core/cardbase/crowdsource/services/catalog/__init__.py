"""
Integration with the catalog database to persist submissions and their effects.

Submissions, contributor statistics and the catalog tables that approved
submissions modify all live in the same database, so that the effect of an
approval (a new or modified catalog row), the change in the submission's
status, and the submitter's updated statistics are committed together or not
at all. The caller should use the :func:`.util.transaction` context manager,
and (when reviewing) call :func:`.get_submission` with ``for_update=True``.
This takes a lock on the submission row where the backend supports it.

Reviews are applied at most once: :func:`.mark_reviewed` is a conditional
update on ``status = 'pending'``, and raises :class:`.AlreadyReviewed` if no
row matched because another reviewer got there first.

ORM representations of the tables are located in :mod:`.catalog.models`.
"""

import logging
from datetime import datetime
from functools import wraps
from typing import Dict, List, Optional, Tuple

from flask import Flask
from retry import retry
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, OperationalError

from ... import domain
from ...domain.submission import EntityKind
from ...domain.stats import TrustLevel
from ...domain.util import get_tzaware_utc_now
from .exceptions import CatalogBaseException, NoSuchSubmission, \
    NoSuchEntity, TransactionFailed, Unavailable, PendingConflict, \
    AlreadyReviewed
from .models import Base
from .util import transaction, current_session, db
from . import models, util, entities, ledger, guard

logger = logging.getLogger(__name__)


def handle_operational_errors(func):
    """Catch SQLAlchemy OperationalErrors and raise :class:`.Unavailable`."""
    @wraps(func)
    def inner(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except OperationalError as e:
            raise Unavailable('Catalog database unavailable') from e
    return inner


def _get_db_submission(submission_id: int,
                       for_update: bool = False) -> models.Submission:
    session = current_session()
    query = session.query(models.Submission) \
        .filter(models.Submission.submission_id == submission_id)
    if for_update:
        # Lock the row until the enclosing transaction ends. Does nothing on
        # SQLite, which locks the whole database on write.
        query = query.with_for_update()
    row = query.populate_existing().first()
    if row is None:
        raise NoSuchSubmission(f'Submission {submission_id} not found')
    return row


@handle_operational_errors
def get_submission(submission_id: int,
                   for_update: bool = False) -> domain.Submission:
    """
    Get the current state of a submission from the database.

    Parameters
    ----------
    submission_id : int
    for_update : bool
        Whether or not to lock the submission row for the remainder of the
        enclosing transaction. Use this when reviewing a submission.

    Returns
    -------
    :class:`.domain.Submission`

    Raises
    ------
    :class:`.NoSuchSubmission`
        Raised when there is no such submission.

    """
    return _get_db_submission(submission_id, for_update).to_submission()


@handle_operational_errors
def find_creating_submission(kind: EntityKind,
                             entity_id: int) -> Optional[int]:
    """Get the id of the approved submission that created an entity."""
    row = current_session().query(models.Submission.submission_id) \
        .filter(models.Submission.entity_kind == kind.value) \
        .filter(models.Submission.status == models.Submission.APPROVED) \
        .filter(models.Submission.created_entity_id == entity_id) \
        .order_by(models.Submission.submission_id.asc()) \
        .first()
    return row.submission_id if row is not None else None


@retry(Unavailable, tries=3, delay=1)
def load_submission(submission_id: int) -> domain.Submission:
    """Load a submission outside of a review, retrying if unavailable."""
    return get_submission(submission_id)


@handle_operational_errors
def store_submission(submission: domain.Submission,
                     pending_key: Optional[str] = None) -> domain.Submission:
    """
    Write a new submission to the database.

    Parameters
    ----------
    submission : :class:`.domain.Submission`
        Must not have a ``submission_id`` yet.
    pending_key : str
        Hash from :func:`.guard.pending_key`; only stored while the
        submission is pending.

    Returns
    -------
    :class:`.domain.Submission`
        With ``submission_id`` and ``created`` set.

    Raises
    ------
    :class:`.PendingConflict`
        Raised when another pending submission holds ``pending_key``.

    """
    if submission.submission_id is not None:
        raise ValueError('Submission already stored')
    session = current_session()
    created = submission.created or get_tzaware_utc_now()
    row = models.Submission(
        entity_kind=submission.entity_kind.value,
        submitter_id=submission.submitter_id,
        status=submission.status.value,
        proposed_fields=submission.proposed_fields,
        previous_fields=submission.previous_fields,
        parent_entity_id=submission.parent_entity_id,
        parent_submission_id=submission.parent_submission_id,
        created_entity_id=submission.created_entity_id,
        reviewer_id=submission.reviewer_id,
        review_notes=submission.review_notes,
        submission_notes=submission.submission_notes,
        target_key=submission.target_key,
        pending_key=pending_key if submission.is_pending else None,
        created=created,
        reviewed=submission.reviewed
    )
    session.add(row)
    try:
        session.flush()
    except IntegrityError as e:
        raise PendingConflict('A pending submission for this target'
                              ' already exists') from e
    logger.debug('Stored %s submission %s', row.entity_kind,
                 row.submission_id)
    submission.submission_id = row.submission_id
    submission.created = created
    return submission


@handle_operational_errors
def mark_reviewed(submission_id: int, status: domain.Submission.Status,
                  reviewer_id: int, notes: Optional[str] = None,
                  created_entity_id: Optional[int] = None,
                  reviewed: Optional[datetime] = None) -> datetime:
    """
    Move a pending submission to a terminal status.

    This is a single conditional update (``WHERE status = 'pending'``) that
    also releases the submission's pending key.

    Returns
    -------
    datetime
        The review timestamp.

    Raises
    ------
    :class:`.AlreadyReviewed`
        Raised when the submission was no longer pending.

    """
    if status is domain.Submission.PENDING:
        raise ValueError('Cannot mark a submission as reviewed but pending')
    reviewed = reviewed or get_tzaware_utc_now()
    rows = current_session().query(models.Submission) \
        .filter(models.Submission.submission_id == submission_id) \
        .filter(models.Submission.status == models.Submission.PENDING) \
        .update({
            models.Submission.status: status.value,
            models.Submission.reviewer_id: reviewer_id,
            models.Submission.review_notes: notes,
            models.Submission.created_entity_id: created_entity_id,
            models.Submission.reviewed: reviewed,
            models.Submission.pending_key: None,
        }, synchronize_session=False)
    if rows == 0:
        logger.warning('Submission %s was already reviewed', submission_id)
        raise AlreadyReviewed(f'Submission {submission_id} is not pending')
    logger.debug('Marked submission %s %s', submission_id, status.value)
    return reviewed


@retry(Unavailable, tries=3, delay=1)
@handle_operational_errors
def list_pending(kind: Optional[EntityKind] = None, offset: int = 0,
                 limit: int = 50) \
        -> List[Tuple[domain.Submission, Optional[domain.ContributorStats]]]:
    """
    Get pending submissions, oldest first, with their submitters' stats.

    Parameters
    ----------
    kind : :class:`.EntityKind`
        If provided, only submissions of this kind are returned.
    offset : int
    limit : int

    Returns
    -------
    list
        Items are tuples of a :class:`.domain.Submission` and the
        submitter's :class:`.domain.ContributorStats` (``None`` if the
        submitter has none).

    """
    query = current_session() \
        .query(models.Submission, models.ContributorStats) \
        .outerjoin(models.ContributorStats,
                   models.ContributorStats.user_id
                   == models.Submission.submitter_id) \
        .filter(models.Submission.status == models.Submission.PENDING)
    if kind is not None:
        query = query.filter(models.Submission.entity_kind == kind.value)
    query = query.order_by(models.Submission.created.asc(),
                           models.Submission.submission_id.asc()) \
        .offset(offset).limit(limit)
    return [(row.to_submission(), stats.to_stats() if stats else None)
            for row, stats in query]


@retry(Unavailable, tries=3, delay=1)
@handle_operational_errors
def list_for_submitter(user_id: int,
                       status: Optional[domain.Submission.Status] = None,
                       offset: int = 0, limit: int = 50) \
        -> List[domain.Submission]:
    """Get a contributor's submissions, newest first."""
    query = current_session().query(models.Submission) \
        .filter(models.Submission.submitter_id == user_id)
    if status is not None:
        query = query.filter(models.Submission.status == status.value)
    query = query.order_by(models.Submission.created.desc(),
                           models.Submission.submission_id.desc()) \
        .offset(offset).limit(limit)
    return [row.to_submission() for row in query]


@retry(Unavailable, tries=3, delay=1)
@handle_operational_errors
def get_queue_stats() -> Dict[str, object]:
    """
    Summarize the review queue.

    Returns
    -------
    dict
        ``pending`` and ``total`` map each entity kind to a count;
        ``total_pending``, ``unique_contributors`` and
        ``trusted_contributors`` are integers.

    """
    session = current_session()
    pending = {kind.value: 0 for kind in EntityKind}
    total = {kind.value: 0 for kind in EntityKind}
    counts = session.query(models.Submission.entity_kind,
                           models.Submission.status,
                           func.count(models.Submission.submission_id)) \
        .group_by(models.Submission.entity_kind, models.Submission.status)
    for kind, status, count in counts:
        total[kind] = total.get(kind, 0) + count
        if status == models.Submission.PENDING:
            pending[kind] = pending.get(kind, 0) + count
    contributors = session.query(
        func.count(func.distinct(models.Submission.submitter_id))
    ).scalar()
    trusted_levels = [level.value for level in TrustLevel
                      if level.at_least(TrustLevel.TRUSTED)]
    trusted = session.query(func.count(models.ContributorStats.user_id)) \
        .filter(models.ContributorStats.trust_level.in_(trusted_levels)) \
        .scalar()
    return {
        'pending': pending,
        'total': total,
        'total_pending': sum(pending.values()),
        'unique_contributors': contributors or 0,
        'trusted_contributors': trusted or 0,
    }


def init_app(app: Flask) -> None:
    """Register the SQLAlchemy extension to an application."""
    db.init_app(app)

    @app.teardown_request
    def teardown_request(exception):
        if exception:
            db.session.rollback()
        db.session.remove()


def create_all() -> None:
    """Create all tables in the database."""
    Base.metadata.create_all(db.engine)


def drop_all() -> None:
    """Drop all tables in the database."""
    Base.metadata.drop_all(db.engine)
