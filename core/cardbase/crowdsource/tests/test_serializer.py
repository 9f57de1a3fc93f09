"""Tests for :mod:`.serializer`."""

from datetime import date, datetime
from unittest import TestCase

from pytz import UTC

from ..domain.agent import User
from ..domain.stats import ContributorStats, TrustLevel
from ..domain.submission import EntityKind, ParentReference, Submission
from ..serializer import dumps, loads


class TestDumpLoad(TestCase):
    """Domain objects survive serialization."""

    def test_submission(self):
        """A submission is rebuilt with its dates and references."""
        submission = Submission(
            entity_kind=EntityKind.PLAYER_EDIT, submitter_id=3,
            submission_id=12,
            proposed_fields={'birthdate': date(1974, 6, 26),
                             'nick_name': None},
            previous_fields={'birthdate': None, 'nick_name': 'The Captain'},
            parent=ParentReference(entity_id=8),
            created=datetime(2025, 3, 1, 12, 30, tzinfo=UTC)
        )
        loaded = loads(dumps(submission))
        self.assertIsInstance(loaded, Submission)
        self.assertEqual(loaded, submission)
        self.assertIs(loaded.entity_kind, EntityKind.PLAYER_EDIT)
        self.assertEqual(loaded.proposed_fields['birthdate'],
                         date(1974, 6, 26))
        self.assertEqual(loaded.created.tzinfo.utcoffset(loaded.created),
                         UTC.utcoffset(loaded.created))

    def test_stats(self):
        """Contributor stats are rebuilt with their trust level."""
        stats = ContributorStats(user_id=3, approved_submissions=10,
                                 trust_points=50,
                                 trust_level=TrustLevel.CONTRIBUTOR,
                                 approval_rate=100.0,
                                 per_kind={'card': 10})
        loaded = loads(dumps(stats))
        self.assertEqual(loaded, stats)
        self.assertIs(loaded.trust_level, TrustLevel.CONTRIBUTOR)

    def test_agent(self):
        """Agents are rebuilt as the right kind of agent."""
        user = User(native_id=3, role='admin', username='rwong')
        loaded = loads(dumps(user))
        self.assertIsInstance(loaded, User)
        self.assertEqual(loaded, user)
        self.assertEqual(loaded.role, 'admin')

    def test_strings_that_look_like_dates(self):
        """Strings are loaded as strings, even when they look like dates."""
        fields = {'card_number': '2025-99-99',
                  'notes': '2024-05-01',
                  'mascot': '2024-05-01T10:00:00',
                  'description': 'Issued 2025-03-01 in packs'}
        loaded = loads(dumps(fields))
        self.assertEqual(loaded, fields)
        for name, value in loaded.items():
            self.assertIsInstance(value, str, f'{name} is still a string')

    def test_dates(self):
        """Dates and datetimes are told apart."""
        when = datetime(2025, 3, 1, 12, 30, tzinfo=UTC)
        loaded = loads(dumps({'birthdate': date(2024, 5, 1), 'when': when}))
        self.assertIs(type(loaded['birthdate']), date,
                      "A date is not loaded as a datetime")
        self.assertEqual(loaded['birthdate'], date(2024, 5, 1))
        self.assertEqual(loaded['when'], when)
