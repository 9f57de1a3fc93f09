"""
Review engine: approve or reject pending submissions.

A submission is reviewed exactly once. Approval applies the proposed change
to the catalog, records the review on the submission and updates the
submitter's statistics in a single transaction: either all of that happens,
or none of it does. If two reviewers act on the same submission at the same
time, the conditional status update in
:func:`.services.catalog.mark_reviewed` lets only one of them through; the
other gets :class:`.InvalidState`, and its catalog changes are rolled back.
"""

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from .config import get_setting
from .domain.agent import Agent
from .domain.submission import Submission, ReviewResult
from .domain.util import clean_text
from .exceptions import NotFound, InvalidState, DuplicateSubmission, \
    ValidationError, Conflict, SaveError
from .handlers import get_handler
from .services import catalog
from . import dependency, policy

logger = logging.getLogger(__name__)


@contextmanager
def catalog_errors() -> Generator:
    """Translate catalog service exceptions into pipeline exceptions."""
    try:
        yield
    except (catalog.NoSuchSubmission, catalog.NoSuchEntity) as e:
        raise NotFound(str(e)) from e
    except catalog.AlreadyReviewed as e:
        raise InvalidState(str(e)) from e
    except catalog.PendingConflict as e:
        raise DuplicateSubmission(str(e)) from e
    except (catalog.TransactionFailed, catalog.Unavailable) as e:
        raise SaveError('Failed to save submission') from e


def clean_notes(notes: Optional[str], required: bool = False) \
        -> Optional[str]:
    """
    Tidy reviewer or submitter notes, and verify their length.

    Raises
    ------
    :class:`.ValidationError`
        Raised if ``required`` and the notes are missing or too short, or
        if the notes are too long.

    """
    notes = clean_text(notes) if notes is not None else None
    minimum = get_setting('MIN_REJECT_NOTES_LENGTH')
    if required and (not notes or len(notes) < minimum):
        raise ValidationError('Please explain why the submission is being'
                              ' rejected', 'notes')
    maximum = get_setting('MAX_NOTES_LENGTH')
    if notes and len(notes) > maximum:
        raise ValidationError(f'Must be at most {maximum} characters',
                              'notes')
    return notes or None


def apply_approval(submission: Submission, reviewer_id: int) -> Optional[int]:
    """
    Apply a submission to the catalog.

    Must be called inside of a :func:`.services.catalog.transaction`.

    Parameters
    ----------
    submission : :class:`.Submission`
    reviewer_id : int

    Returns
    -------
    int or None
        The id of the catalog row created by the submission, if any.

    Raises
    ------
    :class:`.ParentNotReady`
        Raised if the submission depends on a submission that has not been
        approved yet.
    :class:`.Conflict`
        Raised if the submission is an edit and the entity has changed since
        the submission was made.

    """
    handler = get_handler(submission.entity_kind)
    parent_id = dependency.resolve_parent(submission)
    if submission.entity_kind.is_edit and get_setting('REJECT_STALE_EDITS') \
            and handler.is_stale(submission):
        logger.info('Submission %s is stale; %s %s has changed',
                    submission.submission_id, handler.TABLE, parent_id)
        raise Conflict(f'The {handler.TABLE} was changed after this'
                       f' submission was made')
    created_id = handler.apply(submission, parent_id, reviewer_id)
    if not handler.creates(submission.proposed_fields):
        return None
    return created_id


def approve(submission_id: int, reviewer: Agent,
            notes: Optional[str] = None) -> ReviewResult:
    """
    Approve a pending submission, and apply it to the catalog.

    Parameters
    ----------
    submission_id : int
    reviewer : :class:`.Agent`
    notes : str
        Optional remarks from the reviewer.

    Returns
    -------
    :class:`.ReviewResult`

    Raises
    ------
    :class:`.Forbidden`
        Raised if the reviewer may not review submissions.
    :class:`.NotFound`
        Raised if there is no such submission, or the entity it modifies
        was removed.
    :class:`.InvalidState`
        Raised if the submission has already been reviewed.
    :class:`.ParentNotReady`
        Raised if the submission depends on a submission that has not been
        approved yet.
    :class:`.Conflict`
        Raised if the submission is a stale edit.

    """
    policy.require_reviewer(reviewer)
    notes = clean_notes(notes)
    with catalog_errors():
        with catalog.transaction():
            submission = catalog.get_submission(submission_id,
                                                for_update=True)
            if not submission.is_pending:
                raise InvalidState(f'Submission {submission_id} was already'
                                   f' {submission.status.value}')
            created_id = apply_approval(submission, reviewer.native_id)
            reviewed = catalog.mark_reviewed(submission_id,
                                             Submission.APPROVED,
                                             reviewer.native_id, notes,
                                             created_id)
            catalog.ledger.on_reviewed(submission.submitter_id, approved=True)

    submission.status = Submission.APPROVED
    submission.reviewer_id = reviewer.native_id
    submission.review_notes = notes
    submission.created_entity_id = created_id
    submission.reviewed = reviewed
    logger.info('Submission %s (%s) approved by %s', submission_id,
                submission.entity_kind.value, reviewer.native_id)
    return ReviewResult(submission=submission, created_entity_id=created_id)


def reject(submission_id: int, reviewer: Agent, notes: str) -> Submission:
    """
    Reject a pending submission. The catalog is not changed.

    Parameters
    ----------
    submission_id : int
    reviewer : :class:`.Agent`
    notes : str
        An explanation for the submitter. Required.

    Returns
    -------
    :class:`.Submission`

    Raises
    ------
    :class:`.Forbidden`
    :class:`.ValidationError`
        Raised if ``notes`` are missing.
    :class:`.NotFound`
    :class:`.InvalidState`

    """
    policy.require_reviewer(reviewer)
    notes = clean_notes(notes, required=True)
    with catalog_errors():
        with catalog.transaction():
            submission = catalog.get_submission(submission_id,
                                                for_update=True)
            if not submission.is_pending:
                raise InvalidState(f'Submission {submission_id} was already'
                                   f' {submission.status.value}')
            reviewed = catalog.mark_reviewed(submission_id,
                                             Submission.REJECTED,
                                             reviewer.native_id, notes)
            catalog.ledger.on_reviewed(submission.submitter_id,
                                       approved=False)

    submission.status = Submission.REJECTED
    submission.reviewer_id = reviewer.native_id
    submission.review_notes = notes
    submission.reviewed = reviewed
    logger.info('Submission %s (%s) rejected by %s', submission_id,
                submission.entity_kind.value, reviewer.native_id)
    return submission
