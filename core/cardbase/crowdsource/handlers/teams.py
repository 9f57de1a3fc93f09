"""Handlers for new teams and team edits."""

import logging
from functools import partial
from typing import Any, Dict, Optional, Tuple

from ..domain.patch import Patch
from ..domain.submission import EntityKind, ParentReference, Submission
from ..domain.util import get_tzaware_utc_now, normalize_name, slugify
from ..exceptions import NotFound, ValidationError
from ..services.catalog import entities, models
from ..services.catalog.util import current_session
from . import validators
from .base import EditHandler, Field, Handler

logger = logging.getLogger(__name__)


def abbreviation(name: str, value: Any, min_length: int = 0) -> str:
    """Team abbreviations are stored upper-case."""
    return validators.text(name, value, min_length=min_length,
                           max_length=10).upper()


class NewTeam(Handler):
    """A proposed new team."""

    KIND = EntityKind.TEAM
    TABLE = 'team'
    FIELDS = (
        Field('name', partial(validators.text, min_length=1, max_length=255),
              required=True),
        Field('city', partial(validators.text, max_length=255)),
        Field('mascot', partial(validators.text, max_length=255)),
        Field('abbreviation', partial(abbreviation, min_length=2)),
        Field('organization_id', partial(validators.integer, min_value=1)),
        Field('primary_color', validators.hex_color),
        Field('secondary_color', validators.hex_color),
    )

    def check(self, fields: Dict[str, Any],
              parent: Optional[ParentReference]) -> None:
        if entities.team_name_taken(fields['name']):
            raise ValidationError('A team with this name already exists')
        org_id = fields.get('organization_id')
        if org_id is not None \
                and current_session().get(models.Organization, org_id) is None:
            raise NotFound(f'No organization with id {org_id}')

    def target_key(self, fields: Dict[str, Any],
                   parent: Optional[ParentReference]) -> str:
        return normalize_name(fields['name'])

    def apply(self, submission: Submission, parent_id: Optional[int],
              reviewer_id: int) -> int:
        fields = submission.proposed_fields
        team = models.Team(
            name=fields['name'],
            city=fields.get('city'),
            mascot=fields.get('mascot'),
            abbreviation=fields.get('abbreviation'),
            organization_id=fields.get('organization_id'),
            primary_color=fields.get('primary_color'),
            secondary_color=fields.get('secondary_color'),
            slug=entities.unique_slug(models.Team, slugify(fields['name'])),
            card_count=0,
            player_count=0,
            created=get_tzaware_utc_now()
        )
        session = current_session()
        session.add(team)
        session.flush()
        logger.debug('Created team %s', team.team_id)
        return team.team_id


class TeamEdit(EditHandler):
    """Proposed changes to an existing team."""

    KIND = EntityKind.TEAM_EDIT
    TABLE = 'team'
    PARENT_TABLE = 'team'
    FIELDS = (
        Field('name', partial(validators.text, min_length=1, max_length=255),
              nullable=False),
        Field('city', partial(validators.text, max_length=255)),
        Field('mascot', partial(validators.text, max_length=255)),
        Field('abbreviation', abbreviation),
        Field('primary_color', validators.hex_color),
        Field('secondary_color', validators.hex_color),
    )

    def patch_row(self, row: models.Team, patch: Patch) -> Tuple[str, ...]:
        written = super(TeamEdit, self).patch_row(row, patch)
        if 'name' in patch:
            row.slug = entities.unique_slug(models.Team, slugify(row.name),
                                            exclude_id=row.team_id)
            written += ('slug',)
        return written
