"""SQLAlchemy ORM classes for the catalog database."""

from datetime import datetime
from typing import Optional

from pytz import UTC
from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, \
    Integer, SmallInteger, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base

from ... import domain
from ...domain.submission import EntityKind
from .util import FriendlyJSON

Base = declarative_base()


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    """Some backends (SQLite) drop the timezone; values are stored in UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


# --- CATALOG ---


class Organization(Base):    # type: ignore
    """A league or governing body, e.g. MLB."""

    __tablename__ = 'organization'

    organization_id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    abbreviation = Column(String(20), unique=True)


class Manufacturer(Base):    # type: ignore
    """A card manufacturer, e.g. Topps."""

    __tablename__ = 'manufacturer'

    manufacturer_id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False, unique=True)


class Set(Base):    # type: ignore
    """A released product, e.g. 2025 Topps Chrome."""

    __tablename__ = 'set'

    set_id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    year = Column(SmallInteger)
    sport = Column(String(50))
    organization_id = Column(ForeignKey('organization.organization_id'))
    manufacturer_id = Column(ForeignKey('manufacturer.manufacturer_id'))
    description = Column(Text)
    slug = Column(String(255), nullable=False, unique=True)
    card_count = Column(Integer, nullable=False, default=0)
    series_count = Column(Integer, nullable=False, default=0)
    is_complete = Column(Boolean, nullable=False, default=False)
    created = Column(DateTime)


class Series(Base):    # type: ignore
    """A run of cards within a set; base series, inserts and parallels."""

    __tablename__ = 'series'
    __table_args__ = (UniqueConstraint('set_id', 'slug'),)

    series_id = Column(Integer, primary_key=True)
    set_id = Column(ForeignKey('set.set_id'), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    slug = Column(String(255), nullable=False)
    card_count = Column(Integer, nullable=False, default=0)
    is_base = Column(Boolean, nullable=False, default=False)
    parallel_of_series_id = Column(ForeignKey('series.series_id'))
    min_print_run = Column(Integer)
    max_print_run = Column(Integer)
    created = Column(DateTime)


class Card(Base):    # type: ignore
    """A single card within a series."""

    __tablename__ = 'card'

    card_id = Column(Integer, primary_key=True)
    series_id = Column(ForeignKey('series.series_id'), nullable=False,
                       index=True)
    card_number = Column(String(50), nullable=False)
    player_names = Column(String(500))
    team_names = Column(String(500))
    is_rookie = Column(Boolean, nullable=False, default=False)
    is_autograph = Column(Boolean, nullable=False, default=False)
    is_relic = Column(Boolean, nullable=False, default=False)
    is_short_print = Column(Boolean, nullable=False, default=False)
    print_run = Column(Integer)
    notes = Column(Text)
    created = Column(DateTime)


class Player(Base):    # type: ignore
    """An athlete who appears on cards."""

    __tablename__ = 'player'

    player_id = Column(Integer, primary_key=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    nick_name = Column(String(255))
    birthdate = Column(Date)
    is_hof = Column(Boolean, nullable=False, default=False)
    display_card_id = Column(ForeignKey('card.card_id'))
    slug = Column(String(255), nullable=False, unique=True)
    card_count = Column(Integer, nullable=False, default=0)
    created = Column(DateTime)


class PlayerAlias(Base):    # type: ignore
    """An alternate name under which a player can be found."""

    __tablename__ = 'player_alias'

    alias_id = Column(Integer, primary_key=True)
    player_id = Column(ForeignKey('player.player_id'), nullable=False,
                       index=True)
    alias_name = Column(String(255), nullable=False)
    alias_type = Column(String(50))
    created_by = Column(Integer)
    created = Column(DateTime)


class PlayerTeam(Base):    # type: ignore
    """Association of a player with a team they played for."""

    __tablename__ = 'player_team'
    __table_args__ = (UniqueConstraint('player_id', 'team_id'),)

    player_team_id = Column(Integer, primary_key=True)
    player_id = Column(ForeignKey('player.player_id'), nullable=False)
    team_id = Column(ForeignKey('team.team_id'), nullable=False)
    card_count = Column(Integer, nullable=False, default=0)
    created = Column(DateTime)


class Team(Base):    # type: ignore
    """A team, e.g. New York Yankees."""

    __tablename__ = 'team'

    team_id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    city = Column(String(255))
    mascot = Column(String(255))
    abbreviation = Column(String(10))
    organization_id = Column(ForeignKey('organization.organization_id'))
    primary_color = Column(String(7))
    secondary_color = Column(String(7))
    slug = Column(String(255), nullable=False, unique=True)
    card_count = Column(Integer, nullable=False, default=0)
    player_count = Column(Integer, nullable=False, default=0)
    created = Column(DateTime)


# --- CONTRIBUTIONS ---


class Submission(Base):    # type: ignore
    """A proposed change to the catalog."""

    __tablename__ = 'contribution_submissions'

    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'

    submission_id = Column(Integer, primary_key=True)
    entity_kind = Column(String(20), nullable=False, index=True)
    submitter_id = Column(Integer, nullable=False, index=True)
    status = Column(String(10), nullable=False, default=PENDING, index=True)
    proposed_fields = Column(FriendlyJSON, nullable=False)
    previous_fields = Column(FriendlyJSON)
    parent_entity_id = Column(Integer)
    parent_submission_id = Column(
        ForeignKey('contribution_submissions.submission_id')
    )
    created_entity_id = Column(Integer)
    reviewer_id = Column(Integer)
    review_notes = Column(Text)
    submission_notes = Column(Text)
    target_key = Column(String(255))
    pending_key = Column(String(40), unique=True)
    """
    Hash of submitter, kind and target key while pending; null afterwards.

    Enforces at most one pending submission for the same target.
    """

    created = Column(DateTime, nullable=False)
    reviewed = Column(DateTime)

    def to_submission(self) -> domain.Submission:
        """Generate a :class:`.domain.Submission` from this row."""
        parent = None
        if self.parent_entity_id is not None \
                or self.parent_submission_id is not None:
            parent = domain.ParentReference(
                entity_id=self.parent_entity_id,
                submission_id=self.parent_submission_id
            )
        return domain.Submission(
            submission_id=self.submission_id,
            entity_kind=EntityKind(self.entity_kind),
            submitter_id=self.submitter_id,
            status=domain.Submission.Status(self.status),
            proposed_fields=dict(self.proposed_fields or {}),
            previous_fields=(dict(self.previous_fields)
                             if self.previous_fields is not None else None),
            parent=parent,
            created_entity_id=self.created_entity_id,
            reviewer_id=self.reviewer_id,
            review_notes=self.review_notes,
            submission_notes=self.submission_notes,
            target_key=self.target_key,
            created=_utc(self.created),
            reviewed=_utc(self.reviewed)
        )


class ContributorStats(Base):    # type: ignore
    """Aggregate submission history for a contributor."""

    __tablename__ = 'contributor_stats'

    user_id = Column(Integer, primary_key=True, autoincrement=False)
    total_submissions = Column(Integer, nullable=False, default=0)
    pending_submissions = Column(Integer, nullable=False, default=0)
    approved_submissions = Column(Integer, nullable=False, default=0)
    rejected_submissions = Column(Integer, nullable=False, default=0)

    set_submissions = Column(Integer, nullable=False, default=0)
    set_edit_submissions = Column(Integer, nullable=False, default=0)
    series_submissions = Column(Integer, nullable=False, default=0)
    card_submissions = Column(Integer, nullable=False, default=0)
    card_edit_submissions = Column(Integer, nullable=False, default=0)
    player_submissions = Column(Integer, nullable=False, default=0)
    player_edit_submissions = Column(Integer, nullable=False, default=0)
    player_alias_submissions = Column(Integer, nullable=False, default=0)
    player_team_submissions = Column(Integer, nullable=False, default=0)
    team_submissions = Column(Integer, nullable=False, default=0)
    team_edit_submissions = Column(Integer, nullable=False, default=0)

    trust_points = Column(Integer, nullable=False, default=0)
    trust_level = Column(String(20), nullable=False, default='novice')
    approval_rate = Column(Float)
    first_submission_at = Column(DateTime)
    last_submission_at = Column(DateTime)
    created = Column(DateTime)

    @staticmethod
    def kind_column(kind: EntityKind) -> Column:
        """Get the per-kind counter column for ``kind``."""
        return getattr(ContributorStats, f'{kind.value}_submissions')

    def to_stats(self) -> domain.ContributorStats:
        """Generate a :class:`.domain.ContributorStats` from this row."""
        return domain.ContributorStats(
            user_id=self.user_id,
            total_submissions=self.total_submissions,
            pending_submissions=self.pending_submissions,
            approved_submissions=self.approved_submissions,
            rejected_submissions=self.rejected_submissions,
            per_kind={
                kind.value: getattr(self, f'{kind.value}_submissions') or 0
                for kind in EntityKind
            },
            trust_points=self.trust_points,
            trust_level=domain.TrustLevel(self.trust_level),
            approval_rate=self.approval_rate,
            first_submission_at=_utc(self.first_submission_at),
            last_submission_at=_utc(self.last_submission_at)
        )
