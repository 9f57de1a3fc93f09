"""Core operations of the contribution and review pipeline."""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from flask import Flask

from . import config, dependency, policy
from .config import get_setting
from .domain.agent import Agent
from .domain.stats import ContributorStats
from .domain.submission import EntityKind, ParentReference, QueueItem, \
    Submission, SubmitResult
from .domain.util import get_tzaware_utc_now
from .exceptions import DuplicateSubmission, ValidationError
from .handlers import get_handler
from .review import approve, reject, apply_approval, catalog_errors, \
    clean_notes
from .services import catalog

logger = logging.getLogger(__name__)

DEFAULTS = (
    'CATALOG_DATABASE_URI', 'SQLALCHEMY_TRACK_MODIFICATIONS',
    'TRUSTED_ROLES', 'AUTO_APPROVE_TRUST_LEVEL', 'REJECT_STALE_EDITS',
    'MIN_REJECT_NOTES_LENGTH', 'MAX_NOTES_LENGTH', 'PAGE_SIZE',
    'MAX_PAGE_SIZE', 'LOGLEVEL'
)
"""Parameters in :mod:`.config` that are set on the application."""


def _paginate(page: int, per_page: Optional[int]) -> Tuple[int, int]:
    """Get the offset and limit for a page of results."""
    if per_page is None:
        per_page = get_setting('PAGE_SIZE')
    if isinstance(page, bool) or not isinstance(page, int) or page < 1:
        raise ValidationError('Must be a positive integer', 'page')
    if isinstance(per_page, bool) or not isinstance(per_page, int) \
            or per_page < 1:
        raise ValidationError('Must be a positive integer', 'per_page')
    per_page = min(per_page, get_setting('MAX_PAGE_SIZE'))
    return (page - 1) * per_page, per_page


def _coerce_kind(kind: Union[EntityKind, str]) -> EntityKind:
    if isinstance(kind, EntityKind):
        return kind
    try:
        return EntityKind(kind)
    except ValueError as e:
        raise ValidationError(f'Unknown entity kind {kind}', 'kind') from e


def _coerce_parent(parent: Union[ParentReference, Mapping, None]) \
        -> Optional[ParentReference]:
    if parent is None or isinstance(parent, ParentReference):
        return parent
    if isinstance(parent, Mapping):
        unknown = set(parent) - {'entity_id', 'submission_id'}
        if unknown:
            raise ValidationError('Must have an entity_id or a'
                                  ' submission_id', 'parent')
        return ParentReference(**parent)
    raise ValidationError('Must have an entity_id or a submission_id',
                          'parent')


def submit(kind: Union[EntityKind, str], submitter: Agent,
           fields: Mapping[str, Any],
           parent: Union[ParentReference, Mapping, None] = None,
           notes: Optional[str] = None) -> SubmitResult:
    """
    Propose a change to the catalog.

    If the submitter is trusted (see :mod:`.policy`), the submission is
    approved and applied to the catalog immediately, and is stored exactly
    as if it had been approved by the submitter. Otherwise it is stored as
    pending, for review.

    Parameters
    ----------
    kind : :class:`.EntityKind` or str
    submitter : :class:`.Agent`
    fields : dict
        Proposed field values. For edits, fields that are left out will not
        be changed, and fields set to ``None`` will be cleared.
    parent : :class:`.ParentReference` or dict
        The entity that the submission depends on (or modifies, for edits),
        or a submission that will create it.
    notes : str
        The submitter's justification for the change.

    Returns
    -------
    :class:`.SubmitResult`

    Raises
    ------
    :class:`.ValidationError`
        Raised if the proposed fields are malformed.
    :class:`.DuplicateSubmission`
        Raised if the submitter already has a pending submission for the
        same target.
    :class:`.NotFound`
        Raised if the parent or a referenced entity does not exist.

    """
    kind = _coerce_kind(kind)
    parent = _coerce_parent(parent)
    if not isinstance(fields, Mapping):
        raise ValidationError('Must be a mapping of field names to values',
                              'fields')
    handler = get_handler(kind)
    submission_notes = clean_notes(notes)
    user_id = submitter.native_id

    with catalog_errors():
        with catalog.transaction():
            cleaned = handler.validate(fields, parent)
            target_key = handler.target_key(cleaned, parent)
            pending_key = catalog.guard.pending_key(user_id, kind, target_key)
            if catalog.guard.is_pending(pending_key):
                raise DuplicateSubmission('You already have a pending'
                                          f' {kind.value} submission for'
                                          ' this target')

            catalog.ledger.ensure(user_id)
            stats = catalog.ledger.get_stats(user_id)
            submission = Submission(
                entity_kind=kind,
                submitter_id=user_id,
                proposed_fields=cleaned,
                previous_fields=handler.snapshot(cleaned, parent),
                parent=parent,
                submission_notes=submission_notes,
                target_key=target_key
            )
            auto_approved = policy.auto_approves(submitter, stats) \
                and dependency.is_resolvable(submission)
            if auto_approved:
                created_id = apply_approval(submission, user_id)
                submission.status = Submission.APPROVED
                submission.reviewer_id = user_id
                submission.reviewed = get_tzaware_utc_now()
                submission.created_entity_id = created_id
            submission = catalog.store_submission(submission, pending_key)
            catalog.ledger.on_submit(user_id, kind)
            if auto_approved:
                catalog.ledger.on_reviewed(user_id, approved=True)

    logger.info('%s submission %s by %s is %s', kind.value,
                submission.submission_id, user_id, submission.status.value)
    return SubmitResult(submission_id=submission.submission_id,
                        auto_approved=auto_approved,
                        created_entity_id=submission.created_entity_id,
                        submission=submission)


def load(submission_id: int) -> Submission:
    """
    Load a submission.

    Raises
    ------
    :class:`.NotFound`
        Raised when a submission with the passed ID cannot be found.

    """
    with catalog_errors():
        return catalog.load_submission(submission_id)


def load_submissions_for_user(user_id: int,
                              status: Union[Submission.Status, str,
                                            None] = None,
                              page: int = 1,
                              per_page: Optional[int] = None) \
        -> List[Submission]:
    """Load a contributor's submissions, newest first."""
    offset, limit = _paginate(page, per_page)
    if status is not None and not isinstance(status, Submission.Status):
        try:
            status = Submission.Status(status)
        except ValueError as e:
            raise ValidationError(f'Unknown status {status}', 'status') from e
    with catalog_errors():
        return catalog.list_for_submitter(user_id, status, offset, limit)


def list_review_queue(kind: Union[EntityKind, str, None] = None,
                      page: int = 1,
                      per_page: Optional[int] = None) -> List[QueueItem]:
    """
    Get pending submissions for review, oldest first.

    Each item carries its submitter's trust level, trust points and approval
    rate, for context.
    """
    if kind is not None:
        kind = _coerce_kind(kind)
    offset, limit = _paginate(page, per_page)
    with catalog_errors():
        rows = catalog.list_pending(kind, offset, limit)
    items = []
    for submission, stats in rows:
        if stats is None:
            stats = ContributorStats(user_id=submission.submitter_id)
        items.append(QueueItem(submission=submission,
                               trust_level=stats.trust_level,
                               trust_points=stats.trust_points,
                               approval_rate=stats.approval_rate))
    return items


def get_contributor_stats(user_id: int) -> ContributorStats:
    """Get a contributor's statistics; all zero if they have none yet."""
    with catalog_errors():
        return catalog.ledger.get_stats(user_id)


def get_queue_stats() -> Dict[str, Any]:
    """Summarize the review queue, for the administrative dashboard."""
    with catalog_errors():
        return catalog.get_queue_stats()


def init_app(app: Flask) -> None:
    """Set default configuration parameters for an application instance."""
    for key in DEFAULTS:
        app.config.setdefault(key, getattr(config, key))
    catalog.init_app(app)
    logging.getLogger('cardbase.crowdsource') \
        .setLevel(app.config['LOGLEVEL'])


__all__ = ('submit', 'approve', 'reject', 'load',
           'load_submissions_for_user', 'list_review_queue',
           'get_contributor_stats', 'get_queue_stats', 'init_app')
