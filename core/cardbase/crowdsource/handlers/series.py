"""Handler for new series."""

import logging
from functools import partial
from typing import Any, Dict, Optional

from ..domain.submission import EntityKind, ParentReference, Submission
from ..domain.util import get_tzaware_utc_now, normalize_name, slugify
from ..exceptions import NotFound
from ..services.catalog import entities, models
from ..services.catalog.util import current_session
from . import validators
from .base import Field, Handler, parent_key

logger = logging.getLogger(__name__)


class NewSeries(Handler):
    """
    A proposed new series within a set.

    The set may be a set submission that has not been approved yet, in which
    case the series can only be approved after the set.
    """

    KIND = EntityKind.SERIES
    TABLE = 'series'
    PARENT_TABLE = 'set'
    PARENT_KIND = EntityKind.SET
    PARENT_REQUIRED = True
    FIELDS = (
        Field('name', partial(validators.text, min_length=2, max_length=255),
              required=True),
        Field('description', partial(validators.text, max_length=5000)),
        Field('base_card_count', partial(validators.integer, min_value=1)),
        Field('is_parallel', validators.boolean, nullable=False),
        Field('parallel_of_series_id',
              partial(validators.integer, min_value=1)),
        Field('print_run', partial(validators.integer, min_value=1)),
    )

    def check(self, fields: Dict[str, Any],
              parent: Optional[ParentReference]) -> None:
        series_id = fields.get('parallel_of_series_id')
        if series_id is not None and not entities.exists('series', series_id):
            raise NotFound(f'No series with id {series_id}')

    def target_key(self, fields: Dict[str, Any],
                   parent: Optional[ParentReference]) -> str:
        name = normalize_name(fields['name'])
        return f'{parent_key(parent, self.PARENT_KIND)}|{name}'

    def apply(self, submission: Submission, parent_id: Optional[int],
              reviewer_id: int) -> int:
        fields = submission.proposed_fields
        card_set = entities.get_row('set', parent_id, for_update=True)
        print_run = fields.get('print_run')
        series = models.Series(
            set_id=card_set.set_id,
            name=fields['name'],
            description=fields.get('description'),
            slug=entities.unique_slug(models.Series, slugify(fields['name']),
                                      set_id=card_set.set_id),
            card_count=fields.get('base_card_count') or 0,
            is_base=not fields.get('is_parallel', False),
            parallel_of_series_id=fields.get('parallel_of_series_id'),
            min_print_run=print_run,
            max_print_run=print_run,
            created=get_tzaware_utc_now()
        )
        session = current_session()
        session.add(series)
        session.flush()
        entities.increment(models.Set, card_set.set_id, 'series_count')
        logger.debug('Created series %s in set %s', series.series_id,
                     card_set.set_id)
        return series.series_id
