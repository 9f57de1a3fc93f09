"""
Contribution and review pipeline for the sports-card catalog.

This package accepts proposed additions and edits to the catalog (sets,
series, cards, players, teams, player aliases and player-team links) from
contributors, tracks each proposal through review, applies approved changes
to the catalog, and keeps score of how reliable each contributor has been.

Overview
========

A proposed change is a :class:`.domain.submission.Submission`. Its
:class:`.domain.submission.EntityKind` selects a handler in
:mod:`.handlers`, which validates the proposed fields and knows how to apply
them to the catalog once approved.

.. code-block:: python

   from cardbase.crowdsource import submit, User
   contributor = User(1234, role='user')
   result = submit('set', contributor,
                   {'name': '2025 Topps', 'year': 2025, 'sport': 'Baseball'})


Submissions start out pending. An administrator approves or rejects them with
:func:`.review.approve` and :func:`.review.reject`:

.. code-block:: python

   from cardbase.crowdsource import approve, reject
   admin = User(1, role='admin')
   outcome = approve(result.submission_id, admin)
   outcome.created_entity_id      # The new set.


Submissions from trusted roles are approved (and applied) immediately. See
:mod:`.policy`.

A submission may depend on something that has only been proposed so far,
e.g. a series for a set that is still pending. Pass the set submission as
the parent; the series can be approved once the set is. See
:mod:`.dependency`.

.. code-block:: python

   from cardbase.crowdsource import ParentReference
   series = submit('series', contributor, {'name': 'Base'},
                   parent=ParentReference(submission_id=result.submission_id))


Every submission and review decision updates the contributor's
:class:`.domain.stats.ContributorStats`: approvals earn trust points,
rejections cost a few. See :func:`.core.get_contributor_stats`.

Watch out for :class:`.exceptions.ValidationError` (bad input),
:class:`.exceptions.DuplicateSubmission`, :class:`.exceptions.InvalidState`
(already reviewed), :class:`.exceptions.ParentNotReady` and
:class:`.exceptions.Forbidden`. All are subclasses of
:class:`.exceptions.CrowdsourceError`.

Finally, :mod:`.services.catalog` provides integration with the catalog
database, where submissions, contributor statistics and the catalog tables
themselves are stored, so that each review is applied in one transaction.
"""

from .domain import User, System, Agent, Submission, EntityKind, \
    ParentReference, ContributorStats, TrustLevel, QueueItem, SubmitResult, \
    ReviewResult
from .core import submit, approve, reject, load, load_submissions_for_user, \
    list_review_queue, get_contributor_stats, get_queue_stats, init_app
