"""Handlers for players, their aliases, and their team associations."""

import logging
from functools import partial
from typing import Any, Dict, Mapping, Optional, Tuple

from ..domain.patch import Patch
from ..domain.submission import EntityKind, ParentReference, Submission
from ..domain.util import get_tzaware_utc_now, normalize_name, slugify
from ..exceptions import NotFound, ValidationError
from ..services.catalog import entities, models
from ..services.catalog.util import current_session
from . import validators
from .base import EditHandler, Field, Handler

logger = logging.getLogger(__name__)

ALIAS_TYPES = ('misspelling', 'nickname', 'maiden_name',
               'alternate_spelling', 'foreign_name')

ADD = 'add'
REMOVE = 'remove'


def _link_player(player_id: int, team_id: int) -> models.PlayerTeam:
    """Associate a player with a team, reusing an existing link."""
    link = entities.get_player_team(player_id, team_id)
    if link is not None:
        return link
    link = models.PlayerTeam(player_id=player_id, team_id=team_id,
                             card_count=0, created=get_tzaware_utc_now())
    session = current_session()
    session.add(link)
    session.flush()
    entities.increment(models.Team, team_id, 'player_count')
    return link


class NewPlayer(Handler):
    """A proposed new player, optionally with the teams they played for."""

    KIND = EntityKind.PLAYER
    TABLE = 'player'
    FIELDS = (
        Field('first_name', partial(validators.text, min_length=1,
                                    max_length=255),
              required=True),
        Field('last_name', partial(validators.text, min_length=1,
                                   max_length=255),
              required=True),
        Field('nick_name', partial(validators.text, max_length=255)),
        Field('birthdate', validators.iso_date),
        Field('is_hof', validators.boolean, nullable=False),
        Field('team_ids', validators.integer_list, nullable=False),
    )

    def check(self, fields: Dict[str, Any],
              parent: Optional[ParentReference]) -> None:
        if entities.player_name_taken(fields['first_name'],
                                      fields['last_name']):
            raise ValidationError('A player with this name already exists')
        for team_id in fields.get('team_ids', []):
            if not entities.exists('team', team_id):
                raise NotFound(f'No team with id {team_id}')

    def target_key(self, fields: Dict[str, Any],
                   parent: Optional[ParentReference]) -> str:
        return normalize_name(fields['first_name'], fields['last_name'])

    def apply(self, submission: Submission, parent_id: Optional[int],
              reviewer_id: int) -> int:
        fields = submission.proposed_fields
        player = models.Player(
            first_name=fields['first_name'],
            last_name=fields['last_name'],
            nick_name=fields.get('nick_name'),
            birthdate=fields.get('birthdate'),
            is_hof=bool(fields.get('is_hof', False)),
            slug=entities.unique_slug(
                models.Player,
                slugify(fields['first_name'], fields['last_name'])
            ),
            card_count=0,
            created=get_tzaware_utc_now()
        )
        session = current_session()
        session.add(player)
        session.flush()
        for team_id in fields.get('team_ids', []):
            _link_player(player.player_id, team_id)
        logger.debug('Created player %s', player.player_id)
        return player.player_id


class PlayerEdit(EditHandler):
    """Proposed changes to an existing player."""

    KIND = EntityKind.PLAYER_EDIT
    TABLE = 'player'
    PARENT_TABLE = 'player'
    COLUMNS = {'display_card': 'display_card_id'}
    FIELDS = (
        Field('first_name', partial(validators.text, min_length=1,
                                    max_length=255),
              nullable=False),
        Field('last_name', partial(validators.text, min_length=1,
                                   max_length=255),
              nullable=False),
        Field('nick_name', partial(validators.text, max_length=255)),
        Field('birthdate', validators.iso_date),
        Field('is_hof', validators.boolean, nullable=False),
        Field('display_card', partial(validators.integer, min_value=1)),
    )

    def check(self, fields: Dict[str, Any],
              parent: Optional[ParentReference]) -> None:
        card_id = fields.get('display_card')
        if card_id is not None and not entities.exists('card', card_id):
            raise NotFound(f'No card with id {card_id}')

    def patch_row(self, row: models.Player, patch: Patch) -> Tuple[str, ...]:
        written = super(PlayerEdit, self).patch_row(row, patch)
        if 'first_name' in patch or 'last_name' in patch:
            row.slug = entities.unique_slug(
                models.Player, slugify(row.first_name, row.last_name),
                exclude_id=row.player_id
            )
            written += ('slug',)
        return written


class NewPlayerAlias(Handler):
    """An alternate name for an existing player."""

    KIND = EntityKind.PLAYER_ALIAS
    TABLE = 'player_alias'
    PARENT_TABLE = 'player'
    PARENT_REQUIRED = True
    FIELDS = (
        Field('alias_name', partial(validators.text, min_length=1,
                                    max_length=255),
              required=True),
        Field('alias_type', partial(validators.one_of, choices=ALIAS_TYPES)),
    )

    def target_key(self, fields: Dict[str, Any],
                   parent: Optional[ParentReference]) -> str:
        return f'{parent.entity_id}|{normalize_name(fields["alias_name"])}'

    def apply(self, submission: Submission, parent_id: Optional[int],
              reviewer_id: int) -> int:
        fields = submission.proposed_fields
        player = entities.get_row('player', parent_id)
        alias = models.PlayerAlias(
            player_id=player.player_id,
            alias_name=fields['alias_name'],
            alias_type=fields.get('alias_type'),
            created_by=reviewer_id,
            created=get_tzaware_utc_now()
        )
        session = current_session()
        session.add(alias)
        session.flush()
        return alias.alias_id


class PlayerTeamChange(Handler):
    """
    Add a player to, or remove a player from, a team.

    Only additions create a catalog row. An addition and a removal for the
    same player and team are different targets, and may both be pending.
    """

    KIND = EntityKind.PLAYER_TEAM
    TABLE = 'player_team'
    PARENT_TABLE = 'player'
    PARENT_REQUIRED = True
    FIELDS = (
        Field('team_id', partial(validators.integer, min_value=1),
              required=True),
        Field('action', partial(validators.one_of, choices=(ADD, REMOVE)),
              required=True),
    )

    def check(self, fields: Dict[str, Any],
              parent: Optional[ParentReference]) -> None:
        if not entities.exists('team', fields['team_id']):
            raise NotFound(f'No team with id {fields["team_id"]}')
        link = entities.get_player_team(parent.entity_id, fields['team_id'])
        if fields['action'] == ADD and link is not None:
            raise ValidationError('Player is already associated with this'
                                  ' team')
        if fields['action'] == REMOVE and link is None:
            raise ValidationError('Player is not associated with this team')

    def creates(self, fields: Mapping[str, Any]) -> bool:
        return fields.get('action') == ADD

    def target_key(self, fields: Dict[str, Any],
                   parent: Optional[ParentReference]) -> str:
        return f'{parent.entity_id}|{fields["team_id"]}|{fields["action"]}'

    def apply(self, submission: Submission, parent_id: Optional[int],
              reviewer_id: int) -> Optional[int]:
        fields = submission.proposed_fields
        player = entities.get_row('player', parent_id)
        if fields['action'] == ADD:
            entities.get_row('team', fields['team_id'])
            if entities.get_player_team(player.player_id,
                                        fields['team_id']) is not None:
                logger.debug('Player %s already on team %s',
                             player.player_id, fields['team_id'])
                return None
            link = _link_player(player.player_id, fields['team_id'])
            return link.player_team_id

        link = entities.get_player_team(player.player_id, fields['team_id'])
        if link is None:
            logger.debug('Player %s already not on team %s',
                         player.player_id, fields['team_id'])
            return None
        current_session().delete(link)
        current_session().flush()
        entities.increment(models.Team, fields['team_id'], 'player_count',
                           by=-1)
        return None
