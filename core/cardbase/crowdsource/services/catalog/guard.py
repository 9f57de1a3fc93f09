"""
Storage support for detecting duplicate pending submissions.

A submission's logical target is described by a key produced by its handler
(see :meth:`.handlers.base.Handler.target_key`). While the submission is
pending, a hash of (submitter, kind, key) is stored in the unique
``pending_key`` column; reviewing the submission clears it. The unique index
is what guarantees that two concurrent requests cannot both create a pending
submission for the same target; :func:`is_pending` is only a courtesy
check that lets us fail early with a helpful message.
"""

import hashlib

from ...domain.submission import EntityKind
from . import models
from .util import current_session


def pending_key(submitter_id: int, kind: EntityKind, target_key: str) -> str:
    """Generate the value stored in ``pending_key`` for a new submission."""
    h = hashlib.new('sha1')
    h.update(f'{submitter_id}:{kind.value}:{target_key}'.encode('utf-8'))
    return h.hexdigest()


def is_pending(key: str) -> bool:
    """Whether a pending submission already holds ``key``."""
    query = current_session().query(models.Submission.submission_id) \
        .filter(models.Submission.pending_key == key)
    return query.first() is not None
