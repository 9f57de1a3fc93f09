"""Tests for :mod:`.catalog.ledger`."""

from unittest import TestCase, mock

from ....domain.stats import TrustLevel
from ....domain.submission import EntityKind
from .. import ledger, exceptions
from .util import in_memory_db


class TestOnSubmit(TestCase):
    """Submissions are counted as they are made."""

    def test_counts(self):
        """Totals, pending and per-kind counters are incremented."""
        with in_memory_db():
            ledger.ensure(1)
            ledger.on_submit(1, EntityKind.SET)
            first = ledger.get_stats(1).first_submission_at
            ledger.on_submit(1, EntityKind.CARD)
            ledger.on_submit(1, EntityKind.CARD)
            stats = ledger.get_stats(1)

        self.assertEqual(stats.total_submissions, 3)
        self.assertEqual(stats.pending_submissions, 3)
        self.assertEqual(stats.per_kind['set'], 1)
        self.assertEqual(stats.per_kind['card'], 2)
        self.assertEqual(stats.per_kind['team'], 0)
        self.assertEqual(stats.first_submission_at, first,
                         "First submission time is set only once")
        self.assertGreaterEqual(stats.last_submission_at, first)

    def test_ensure_is_idempotent(self):
        """Calling ensure twice does not reset the counters."""
        with in_memory_db():
            ledger.ensure(1)
            ledger.on_submit(1, EntityKind.TEAM)
            ledger.ensure(1)
            self.assertEqual(ledger.get_stats(1).total_submissions, 1)

    def test_without_stats(self):
        """Counting for a user without a stats row is an error."""
        with in_memory_db():
            with self.assertRaises(exceptions.NoSuchEntity):
                ledger.on_submit(1, EntityKind.SET)


class TestOnReviewed(TestCase):
    """Review decisions move trust points and derived values."""

    def test_three_approvals_and_a_rejection(self):
        """Three approvals and one rejection leaves 13 points."""
        with in_memory_db():
            ledger.ensure(1)
            for _ in range(4):
                ledger.on_submit(1, EntityKind.CARD)
            for _ in range(3):
                ledger.on_reviewed(1, True)
            ledger.on_reviewed(1, False)
            stats = ledger.get_stats(1)

        self.assertEqual(stats.trust_points, 13)
        self.assertEqual(stats.trust_level, TrustLevel.NOVICE)
        self.assertEqual(stats.approval_rate, 75.0)
        self.assertEqual(stats.pending_submissions, 0)
        self.assertEqual(stats.approved_submissions, 3)
        self.assertEqual(stats.rejected_submissions, 1)

    def test_points_do_not_go_negative(self):
        """A rejection never takes points below zero."""
        with in_memory_db():
            ledger.ensure(1)
            ledger.on_submit(1, EntityKind.CARD)
            ledger.on_reviewed(1, False)
            stats = ledger.get_stats(1)

        self.assertEqual(stats.trust_points, 0)
        self.assertEqual(stats.approval_rate, 0.0)

    def test_promotion(self):
        """Ten approvals earn contributor status."""
        with in_memory_db():
            ledger.ensure(1)
            for _ in range(10):
                ledger.on_submit(1, EntityKind.CARD)
                ledger.on_reviewed(1, True)
            stats = ledger.get_stats(1)

        self.assertEqual(stats.trust_points, 50)
        self.assertEqual(stats.trust_level, TrustLevel.CONTRIBUTOR)
        self.assertEqual(stats.approval_rate, 100.0)

    def test_rate_is_rounded(self):
        """The approval rate is rounded to two decimal places."""
        with in_memory_db():
            ledger.ensure(1)
            ledger.on_reviewed(1, True)
            ledger.on_reviewed(1, False)
            ledger.on_reviewed(1, False)
            stats = ledger.get_stats(1)
        self.assertAlmostEqual(stats.approval_rate, 33.33)

    def test_derived_values_use_domain_rules(self):
        """Trust level and approval rate come from the domain functions."""
        with in_memory_db():
            ledger.ensure(1)
            with mock.patch.object(ledger, 'trust_level_for',
                                   return_value=TrustLevel.EXPERT) as level, \
                    mock.patch.object(ledger, 'approval_rate',
                                      return_value=12.5) as rate:
                ledger.on_reviewed(1, True)
            stats = ledger.get_stats(1)

        level.assert_called_once_with(5)
        rate.assert_called_once_with(1, 0)
        self.assertEqual(stats.trust_level, TrustLevel.EXPERT,
                         "The trust level is stored as computed")
        self.assertEqual(stats.approval_rate, 12.5)


class TestGetStats(TestCase):
    """Stats can be read for anyone."""

    def test_no_stats(self):
        """A user without a stats row has zero stats."""
        with in_memory_db():
            stats = ledger.get_stats(42)
        self.assertEqual(stats.user_id, 42)
        self.assertEqual(stats.total_submissions, 0)
        self.assertIsNone(stats.approval_rate)
        self.assertEqual(stats.trust_level, TrustLevel.NOVICE)
