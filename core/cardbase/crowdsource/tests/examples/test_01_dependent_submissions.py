"""Example 1: proposing a set and its series before either is approved."""

from unittest import TestCase

from flask import Flask

from ...domain.agent import User, System
from ...domain.stats import TrustLevel
from ...domain.submission import EntityKind, ParentReference
from ...exceptions import ParentNotReady, ValidationError
from ...services.catalog import models
from ... import core
from ..util import in_memory_db, seed_catalog


class TestSetThenSeries(TestCase):
    """A contributor proposes a new set, and a series in that set."""

    def setUp(self):
        """Create an app, a contributor and a reviewer."""
        self.app = Flask('test')
        self.contributor = User(native_id=1, role='user',
                                username='dspringer', email='ds@example.com')
        self.admin = User(native_id=9, role='admin', username='rwong',
                          email='rw@example.com')

    def test_series_waits_for_its_set(self):
        """The series can't be approved until the set has been."""
        with in_memory_db(self.app) as session:
            seed_catalog(session)

            set_result = core.submit(
                EntityKind.SET, self.contributor,
                {'name': '2025 Topps Chrome', 'year': 2025,
                 'sport': 'Baseball', 'manufacturer': 'topps'},
                notes='Released in August'
            )
            self.assertFalse(set_result.auto_approved,
                             "Contributor submissions are reviewed")
            series_result = core.submit(
                'series', self.contributor, {'name': 'Refractors',
                                             'is_parallel': True,
                                             'print_run': 499},
                parent={'submission_id': set_result.submission_id}
            )
            self.assertTrue(core.load(series_result.submission_id).is_pending)
            self.assertEqual(
                core.load(series_result.submission_id).parent,
                ParentReference(submission_id=set_result.submission_id)
            )

            with self.assertRaises(ParentNotReady):
                core.approve(series_result.submission_id, self.admin)
            self.assertTrue(core.load(series_result.submission_id).is_pending,
                            "Series is still pending")
            self.assertEqual(session.query(models.Series).count(), 0,
                             "Nothing was added to the catalog")

            set_review = core.approve(set_result.submission_id, self.admin,
                                      'Confirmed with the checklist')
            set_id = set_review.created_entity_id
            self.assertIsNotNone(set_id)
            approved_set = core.load(set_result.submission_id)
            self.assertTrue(approved_set.is_approved)
            self.assertEqual(approved_set.created_entity_id, set_id)
            self.assertEqual(approved_set.reviewer_id, 9)
            self.assertEqual(approved_set.review_notes,
                             'Confirmed with the checklist')

            card_set = session.get(models.Set, set_id)
            self.assertEqual(card_set.name, '2025 Topps Chrome')
            self.assertEqual(card_set.slug, '2025-2025-topps-chrome')
            self.assertEqual(card_set.organization_id, 1)
            self.assertEqual(card_set.manufacturer_id, 1,
                             "Manufacturer is matched regardless of case")
            base = session.query(models.Series) \
                .filter(models.Series.set_id == set_id).one()
            self.assertTrue(base.is_base, "A base series is created")

            stats = core.get_contributor_stats(1)
            self.assertEqual(stats.trust_points, 5)
            self.assertEqual(stats.approved_submissions, 1)
            self.assertEqual(stats.pending_submissions, 1)
            self.assertEqual(stats.per_kind['set'], 1)
            self.assertEqual(stats.per_kind['series'], 1)

            series_review = core.approve(series_result.submission_id,
                                         self.admin)
            series = session.get(models.Series,
                                 series_review.created_entity_id)
            self.assertEqual(series.set_id, set_id)
            self.assertEqual(series.name, 'Refractors')
            self.assertFalse(series.is_base)
            self.assertEqual(series.min_print_run, 499)
            self.assertEqual(session.get(models.Set, set_id).series_count, 2)

            stats = core.get_contributor_stats(1)
            self.assertEqual(stats.trust_points, 10)
            self.assertEqual(stats.pending_submissions, 0)
            self.assertEqual(stats.trust_level, TrustLevel.NOVICE)
            self.assertEqual(stats.approval_rate, 100.0)

    def test_card_in_a_pending_series(self):
        """A card is resolved one step at a time."""
        with in_memory_db(self.app) as session:
            seed_catalog(session)
            set_id = core.submit(
                EntityKind.SET, self.contributor,
                {'name': '1989 Upper Deck', 'year': 1989, 'sport': 'Baseball'}
            ).submission_id
            series_id = core.submit(
                EntityKind.SERIES, self.contributor, {'name': 'Base'},
                parent=ParentReference(submission_id=set_id)
            ).submission_id
            card_id = core.submit(
                EntityKind.CARD, self.contributor,
                {'card_number': '1', 'player_names': 'Ken Griffey Jr.',
                 'is_rookie': True},
                parent=ParentReference(submission_id=series_id)
            ).submission_id

            with self.assertRaises(ParentNotReady):
                core.approve(card_id, self.admin)
            core.approve(set_id, self.admin)
            with self.assertRaises(ParentNotReady):
                core.approve(card_id, self.admin)
            series = core.approve(series_id, self.admin)
            card = core.approve(card_id, System(native_id=0))

            row = session.get(models.Card, card.created_entity_id)
            self.assertEqual(row.series_id, series.created_entity_id)
            self.assertTrue(row.is_rookie)
            self.assertFalse(row.is_autograph)
            self.assertEqual(
                session.get(models.Series,
                            series.created_entity_id).card_count, 1
            )

    def test_rejected_parent(self):
        """Children of a rejected submission can never be approved."""
        with in_memory_db(self.app) as session:
            seed_catalog(session)
            set_id = core.submit(
                EntityKind.SET, self.contributor,
                {'name': '2025 Bowman', 'year': 2025, 'sport': 'Baseball'}
            ).submission_id
            series_id = core.submit(
                EntityKind.SERIES, self.contributor, {'name': 'Prospects'},
                parent=ParentReference(submission_id=set_id)
            ).submission_id
            core.reject(set_id, self.admin, 'Already in the catalog')

            with self.assertRaises(ParentNotReady):
                core.approve(series_id, self.admin)
            with self.assertRaises(ValidationError):
                core.submit(EntityKind.SERIES, self.contributor,
                            {'name': 'Chrome Prospects'},
                            parent=ParentReference(submission_id=set_id))
            core.reject(series_id, self.admin, 'The set was rejected')

            stats = core.get_contributor_stats(1)
            self.assertEqual(stats.rejected_submissions, 2)
            self.assertEqual(stats.trust_points, 0)
            self.assertEqual(stats.approval_rate, 0.0)
