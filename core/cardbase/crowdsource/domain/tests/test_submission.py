"""Tests for :mod:`.domain.submission`."""

from unittest import TestCase

from ...exceptions import ValidationError
from ..submission import EntityKind, ParentReference, Submission


class TestParentReference(TestCase):
    """A parent is an entity or a submission, not both."""

    def test_both(self):
        """Setting both references is a validation error."""
        with self.assertRaises(ValidationError):
            ParentReference(entity_id=1, submission_id=2)

    def test_pending(self):
        """A reference to a submission is pending."""
        self.assertTrue(ParentReference(submission_id=2).is_pending)
        self.assertFalse(ParentReference(entity_id=1).is_pending)
        self.assertTrue(ParentReference().is_empty)


class TestSubmission(TestCase):
    """Tests for :class:`.Submission`."""

    def test_coercion(self):
        """Kind, status and parent may be passed as plain values."""
        submission = Submission(entity_kind='series', submitter_id=3,
                                status='approved',
                                parent={'submission_id': 7})
        self.assertIs(submission.entity_kind, EntityKind.SERIES)
        self.assertIs(submission.status, Submission.APPROVED)
        self.assertTrue(submission.is_approved)
        self.assertEqual(submission.parent_submission_id, 7)
        self.assertIsNone(submission.parent_entity_id)

    def test_new_submission_is_pending(self):
        """Submissions start out pending."""
        submission = Submission(entity_kind=EntityKind.SET, submitter_id=3)
        self.assertTrue(submission.is_pending)
        self.assertIsNone(submission.created_entity_id)

    def test_edit_kinds(self):
        """Edit kinds are recognized by name."""
        self.assertTrue(EntityKind.CARD_EDIT.is_edit)
        self.assertTrue(EntityKind.SET_EDIT.is_edit)
        self.assertFalse(EntityKind.PLAYER_TEAM.is_edit)
        self.assertFalse(EntityKind.PLAYER_ALIAS.is_edit)

    def test_patch(self):
        """Proposed fields are available as a patch."""
        submission = Submission(entity_kind=EntityKind.TEAM_EDIT,
                                submitter_id=3,
                                proposed_fields={'city': None})
        self.assertIn('city', submission.patch)
        self.assertIsNone(submission.patch.get('city'),
                          "The city is cleared")
