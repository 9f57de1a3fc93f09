"""Handlers for new cards and card edits."""

import logging
from functools import partial
from typing import Any, Dict, Optional

from ..domain.submission import EntityKind, ParentReference, Submission
from ..domain.util import get_tzaware_utc_now, normalize_name
from ..services.catalog import entities, models
from ..services.catalog.util import current_session
from . import validators
from .base import EditHandler, Field, Handler, parent_key

logger = logging.getLogger(__name__)

FLAGS = ('is_rookie', 'is_autograph', 'is_relic', 'is_short_print')


class NewCard(Handler):
    """A proposed new card within a series."""

    KIND = EntityKind.CARD
    TABLE = 'card'
    PARENT_TABLE = 'series'
    PARENT_KIND = EntityKind.SERIES
    PARENT_REQUIRED = True
    FIELDS = (
        Field('card_number', partial(validators.text, min_length=1,
                                     max_length=50),
              required=True),
        Field('player_names', partial(validators.text, max_length=500)),
        Field('team_names', partial(validators.text, max_length=500)),
        *[Field(flag, validators.boolean, nullable=False) for flag in FLAGS],
        Field('print_run', partial(validators.integer, min_value=1)),
        Field('notes', partial(validators.text, max_length=2000)),
    )

    def target_key(self, fields: Dict[str, Any],
                   parent: Optional[ParentReference]) -> str:
        number = normalize_name(fields['card_number'])
        return f'{parent_key(parent, self.PARENT_KIND)}|{number}'

    def apply(self, submission: Submission, parent_id: Optional[int],
              reviewer_id: int) -> int:
        fields = submission.proposed_fields
        series = entities.get_row('series', parent_id, for_update=True)
        card = models.Card(
            series_id=series.series_id,
            card_number=fields['card_number'],
            player_names=fields.get('player_names'),
            team_names=fields.get('team_names'),
            print_run=fields.get('print_run'),
            notes=fields.get('notes'),
            created=get_tzaware_utc_now(),
            **{flag: bool(fields.get(flag, False)) for flag in FLAGS}
        )
        session = current_session()
        session.add(card)
        session.flush()
        entities.increment(models.Series, series.series_id, 'card_count')
        logger.debug('Created card %s in series %s', card.card_id,
                     series.series_id)
        return card.card_id


class CardEdit(EditHandler):
    """Proposed changes to an existing card."""

    KIND = EntityKind.CARD_EDIT
    TABLE = 'card'
    PARENT_TABLE = 'card'
    FIELDS = (
        Field('card_number', partial(validators.text, min_length=1,
                                     max_length=50),
              nullable=False),
        *[Field(flag, validators.boolean, nullable=False) for flag in FLAGS],
        Field('print_run', partial(validators.integer, min_value=1)),
        Field('notes', partial(validators.text, max_length=5000)),
    )
