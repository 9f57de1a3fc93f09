"""Tests for storing and retrieving submissions."""

from datetime import datetime, timedelta
from unittest import TestCase, mock

from pytz import UTC
from sqlalchemy.exc import OperationalError

from ....domain.submission import EntityKind, ParentReference, Submission
from ... import catalog
from .. import get_submission, store_submission, mark_reviewed, \
    list_pending, list_for_submitter, get_queue_stats, exceptions, guard, \
    ledger, models, transaction
from .util import in_memory_db


def _set_submission(name='2025 Topps', submitter_id=1, **extra):
    return Submission(entity_kind=EntityKind.SET, submitter_id=submitter_id,
                      proposed_fields={'name': name, 'year': 2025,
                                       'sport': 'Baseball'},
                      target_key=f'{name.lower()}|2025', **extra)


class TestGetSubmission(TestCase):
    """Test :func:`.catalog.get_submission`."""

    def test_get_submission_that_does_not_exist(self):
        """Test that an exception is raised when submission doesn't exist."""
        with in_memory_db():
            with self.assertRaises(exceptions.NoSuchSubmission):
                get_submission(1)

    def test_round_trip(self):
        """A stored submission can be retrieved."""
        with in_memory_db():
            stored = store_submission(_set_submission(
                parent=None, submission_notes='From the checklist'
            ), guard.pending_key(1, EntityKind.SET, '2025 topps|2025'))
            submission = get_submission(stored.submission_id)

        self.assertEqual(submission.submission_id, stored.submission_id)
        self.assertEqual(submission.entity_kind, EntityKind.SET)
        self.assertTrue(submission.is_pending)
        self.assertEqual(submission.proposed_fields['year'], 2025)
        self.assertEqual(submission.submission_notes, 'From the checklist')
        self.assertIsNone(submission.parent)
        self.assertIsNotNone(submission.created.tzinfo,
                             "Timestamps are in UTC")

    def test_parent_reference(self):
        """The parent reference is stored."""
        with in_memory_db():
            stored = store_submission(Submission(
                entity_kind=EntityKind.SERIES, submitter_id=1,
                proposed_fields={'name': 'Base'},
                parent=ParentReference(submission_id=12)
            ))
            submission = get_submission(stored.submission_id)
        self.assertEqual(submission.parent, ParentReference(submission_id=12))

    def test_database_unavailable(self):
        """Operational errors are raised as :class:`.Unavailable`."""
        with mock.patch(f'{catalog.__name__}._get_db_submission',
                        side_effect=OperationalError('SELECT', {}, None)):
            with self.assertRaises(exceptions.Unavailable):
                get_submission(1)


class TestPendingKey(TestCase):
    """Only one pending submission may hold a pending key."""

    def test_duplicate_pending_key(self):
        """A second pending submission for the same target is refused."""
        key = guard.pending_key(1, EntityKind.SET, '2025 topps|2025')
        with in_memory_db() as session:
            store_submission(_set_submission(), key)
            session.commit()
            self.assertTrue(guard.is_pending(key))
            with self.assertRaises(exceptions.PendingConflict):
                with transaction():
                    store_submission(_set_submission(), key)
            self.assertEqual(session.query(models.Submission).count(), 1)

    def test_keys_differ_by_submitter(self):
        """Different submitters may propose the same thing."""
        self.assertNotEqual(
            guard.pending_key(1, EntityKind.SET, '2025 topps|2025'),
            guard.pending_key(2, EntityKind.SET, '2025 topps|2025')
        )

    def test_review_releases_key(self):
        """Once reviewed, the target is free again."""
        key = guard.pending_key(1, EntityKind.SET, '2025 topps|2025')
        with in_memory_db():
            first = store_submission(_set_submission(), key)
            mark_reviewed(first.submission_id, Submission.REJECTED, 9,
                          'Duplicate of an existing set')
            self.assertFalse(guard.is_pending(key))
            second = store_submission(_set_submission(), key)
            self.assertNotEqual(first.submission_id, second.submission_id)


class TestMarkReviewed(TestCase):
    """Reviews are conditional on the submission being pending."""

    def test_mark_reviewed(self):
        """The review is recorded on the submission."""
        with in_memory_db():
            stored = store_submission(_set_submission())
            mark_reviewed(stored.submission_id, Submission.APPROVED, 9,
                          'Looks good', created_entity_id=42)
            submission = get_submission(stored.submission_id)

        self.assertTrue(submission.is_approved)
        self.assertEqual(submission.reviewer_id, 9)
        self.assertEqual(submission.review_notes, 'Looks good')
        self.assertEqual(submission.created_entity_id, 42)
        self.assertIsNotNone(submission.reviewed)

    def test_already_reviewed(self):
        """A second review does not match any row."""
        with in_memory_db():
            stored = store_submission(_set_submission())
            mark_reviewed(stored.submission_id, Submission.APPROVED, 9,
                          created_entity_id=42)
            with self.assertRaises(exceptions.AlreadyReviewed):
                mark_reviewed(stored.submission_id, Submission.REJECTED, 8,
                              'Too late')
            submission = get_submission(stored.submission_id)

        self.assertTrue(submission.is_approved, "Status is unchanged")
        self.assertEqual(submission.created_entity_id, 42)
        self.assertEqual(submission.reviewer_id, 9)

    def test_cannot_mark_pending(self):
        """Pending is not a review outcome."""
        with in_memory_db():
            stored = store_submission(_set_submission())
            with self.assertRaises(ValueError):
                mark_reviewed(stored.submission_id, Submission.PENDING, 9)


class TestListing(TestCase):
    """Tests for listing submissions."""

    def setUp(self):
        """Submissions made over the course of an hour."""
        self.start = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)

    def _store(self, name, submitter_id, minutes, kind=EntityKind.SET):
        submission = _set_submission(name, submitter_id,
                                     created=self.start
                                     + timedelta(minutes=minutes))
        submission.entity_kind = kind
        return store_submission(submission)

    def test_review_queue_is_oldest_first(self):
        """The review queue is ordered by submission time."""
        with in_memory_db():
            ledger.ensure(2)
            ledger.on_submit(2, EntityKind.SET)
            newer = self._store('2025 Bowman', 1, 30)
            older = self._store('2025 Donruss', 2, 10)
            reviewed = self._store('2025 Panini', 1, 0)
            mark_reviewed(reviewed.submission_id, Submission.REJECTED, 9, 'x')
            queue = list_pending()

        self.assertEqual([s.submission_id for s, _ in queue],
                         [older.submission_id, newer.submission_id])
        self.assertEqual(queue[0][1].user_id, 2, "Stats are included")
        self.assertIsNone(queue[1][1], "User 1 has no stats")

    def test_review_queue_by_kind(self):
        """The queue can be limited to one kind, and paged."""
        with in_memory_db():
            for i in range(5):
                self._store(f'Team {i}', 1, i, EntityKind.TEAM)
            self._store('2025 Topps', 1, 10)
            teams = list_pending(EntityKind.TEAM, offset=2, limit=2)
            sets = list_pending(EntityKind.SET)

        self.assertEqual(len(teams), 2)
        self.assertEqual(teams[0][0].proposed_fields['name'], 'Team 2')
        self.assertEqual(len(sets), 1)

    def test_list_for_submitter(self):
        """A contributor's submissions are newest first."""
        with in_memory_db():
            first = self._store('2025 Bowman', 1, 0)
            second = self._store('2025 Donruss', 1, 10)
            self._store('2025 Panini', 2, 20)
            mark_reviewed(first.submission_id, Submission.APPROVED, 9)
            everything = list_for_submitter(1)
            pending = list_for_submitter(1, Submission.PENDING)

        self.assertEqual([s.submission_id for s in everything],
                         [second.submission_id, first.submission_id])
        self.assertEqual([s.submission_id for s in pending],
                         [second.submission_id])

    def test_queue_stats(self):
        """The queue can be summarized."""
        with in_memory_db():
            first = self._store('2025 Bowman', 1, 0)
            self._store('2025 Donruss', 2, 10)
            self._store('Expos', 2, 20, EntityKind.TEAM)
            mark_reviewed(first.submission_id, Submission.APPROVED, 9)
            summary = get_queue_stats()

        self.assertEqual(summary['pending']['set'], 1)
        self.assertEqual(summary['total']['set'], 2)
        self.assertEqual(summary['pending']['team'], 1)
        self.assertEqual(summary['pending']['card'], 0)
        self.assertEqual(summary['total_pending'], 2)
        self.assertEqual(summary['unique_contributors'], 2)
        self.assertEqual(summary['trusted_contributors'], 0)
