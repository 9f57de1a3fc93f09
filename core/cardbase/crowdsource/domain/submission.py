"""Data structures for contributions."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from dataclasses import dataclass, field

from ..exceptions import ValidationError
from .patch import Patch
from .stats import TrustLevel


class EntityKind(Enum):
    """The kind of catalog change proposed by a submission."""

    SET = 'set'
    SET_EDIT = 'set_edit'
    SERIES = 'series'
    CARD = 'card'
    CARD_EDIT = 'card_edit'
    PLAYER = 'player'
    PLAYER_EDIT = 'player_edit'
    PLAYER_ALIAS = 'player_alias'
    PLAYER_TEAM = 'player_team'
    TEAM = 'team'
    TEAM_EDIT = 'team_edit'

    @property
    def is_edit(self) -> bool:
        """Edit kinds patch an existing catalog entity."""
        return self.value.endswith('_edit')


@dataclass
class ParentReference:
    """
    Pointer from a submission to the entity that it depends on.

    Either a catalog entity that already exists, or another submission
    whose approval will create that entity. Never both.
    """

    entity_id: Optional[int] = field(default=None)
    submission_id: Optional[int] = field(default=None)

    def __post_init__(self) -> None:
        """Only one of the two references may be set."""
        if self.entity_id is not None and self.submission_id is not None:
            raise ValidationError('Provide an entity or a submission as the'
                                  ' parent, not both', 'parent')

    @property
    def is_pending(self) -> bool:
        """Whether the parent is (still) a submission."""
        return self.entity_id is None and self.submission_id is not None

    @property
    def is_empty(self) -> bool:
        return self.entity_id is None and self.submission_id is None


@dataclass
class Submission:
    """A proposed change to the catalog, and its review outcome."""

    class Status(Enum):
        """Review status; pending is the only non-terminal status."""

        PENDING = 'pending'
        APPROVED = 'approved'
        REJECTED = 'rejected'

    PENDING = Status.PENDING
    APPROVED = Status.APPROVED
    REJECTED = Status.REJECTED

    entity_kind: EntityKind
    submitter_id: int
    submission_id: Optional[int] = field(default=None)
    status: 'Submission.Status' = field(default=Status.PENDING)
    proposed_fields: Dict[str, Any] = field(default_factory=dict)
    """Sparse map of field names to proposed values."""

    previous_fields: Optional[Dict[str, Any]] = field(default=None)
    """
    Live values of the proposed fields at submission time.

    Only populated for edit kinds.
    """

    parent: Optional[ParentReference] = field(default=None)
    created_entity_id: Optional[int] = field(default=None)
    reviewer_id: Optional[int] = field(default=None)
    review_notes: Optional[str] = field(default=None)
    submission_notes: Optional[str] = field(default=None)
    target_key: Optional[str] = field(default=None)
    """The logical target used to detect duplicate pending submissions."""

    created: Optional[datetime] = field(default=None)
    reviewed: Optional[datetime] = field(default=None)

    def __post_init__(self) -> None:
        """Coerce enums and the parent reference."""
        if not isinstance(self.entity_kind, EntityKind):
            self.entity_kind = EntityKind(self.entity_kind)
        if not isinstance(self.status, Submission.Status):
            self.status = Submission.Status(self.status)
        if isinstance(self.parent, dict):
            self.parent = ParentReference(**self.parent)

    @property
    def is_pending(self) -> bool:
        return self.status is Submission.PENDING

    @property
    def is_approved(self) -> bool:
        return self.status is Submission.APPROVED

    @property
    def is_rejected(self) -> bool:
        return self.status is Submission.REJECTED

    @property
    def patch(self) -> Patch:
        """The proposed fields as a :class:`.Patch`."""
        return Patch(self.proposed_fields)

    @property
    def parent_entity_id(self) -> Optional[int]:
        return self.parent.entity_id if self.parent else None

    @property
    def parent_submission_id(self) -> Optional[int]:
        return self.parent.submission_id if self.parent else None


@dataclass
class QueueItem:
    """A pending submission, with context about its submitter."""

    submission: Submission
    trust_level: TrustLevel = field(default=TrustLevel.NOVICE)
    trust_points: int = field(default=0)
    approval_rate: Optional[float] = field(default=None)


@dataclass
class SubmitResult:
    """Outcome of :func:`.core.submit`."""

    submission_id: int
    auto_approved: bool
    created_entity_id: Optional[int]
    submission: Submission


@dataclass
class ReviewResult:
    """Outcome of :func:`.review.approve`."""

    submission: Submission
    created_entity_id: Optional[int]
