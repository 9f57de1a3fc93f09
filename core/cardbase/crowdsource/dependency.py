"""
Resolves a submission's parent to a concrete catalog entity.

A submission may depend on a parent that only exists as another submission,
e.g. a series proposed for a set that is itself still awaiting review. When
a submission is approved, the id of the catalog row that it created is
stored on it (``created_entity_id``). Resolving a parent is therefore a
single hop: read the parent submission and use its ``created_entity_id``.
A card whose series belongs to a set that is still pending is resolved in
two separate steps, as the set and then the series are approved.
"""

import logging
from typing import Optional

from .domain.submission import Submission
from .exceptions import NotFound, ParentNotReady
from .services import catalog

logger = logging.getLogger(__name__)


def resolve_parent(submission: Submission) -> Optional[int]:
    """
    Get the id of the catalog entity that ``submission`` depends on.

    Parameters
    ----------
    submission : :class:`.Submission`

    Returns
    -------
    int or None
        ``None`` if the submission has no parent.

    Raises
    ------
    :class:`.ParentNotReady`
        Raised if the parent is a submission that has not been approved.
    :class:`.NotFound`
        Raised if the parent submission does not exist.

    """
    parent = submission.parent
    if parent is None or parent.is_empty:
        return None
    if parent.entity_id is not None:
        return parent.entity_id
    try:
        parent_submission = catalog.get_submission(parent.submission_id)
    except catalog.NoSuchSubmission as e:
        raise NotFound(f'No submission with id {parent.submission_id}') from e
    if not parent_submission.is_approved \
            or parent_submission.created_entity_id is None:
        logger.debug('Parent submission %s of %s is %s',
                     parent.submission_id, submission.submission_id,
                     parent_submission.status.value)
        raise ParentNotReady(f'Submission {parent.submission_id} has not'
                             f' been approved')
    return parent_submission.created_entity_id


def is_resolvable(submission: Submission) -> bool:
    """Whether the parent of ``submission`` can be resolved right now."""
    try:
        resolve_parent(submission)
    except ParentNotReady:
        return False
    return True
