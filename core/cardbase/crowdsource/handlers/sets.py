"""Handlers for new sets and set edits."""

import logging
from functools import partial
from typing import Any, Dict, Optional, Tuple

from ..domain.patch import Patch
from ..domain.submission import EntityKind, ParentReference, Submission
from ..domain.util import get_tzaware_utc_now, normalize_name, slugify
from ..services.catalog import entities, models
from ..services.catalog.util import current_session
from . import validators
from .base import EditHandler, Field, Handler

logger = logging.getLogger(__name__)

MIN_YEAR = 1900
MAX_YEAR = 2100
MIN_EDIT_YEAR = 1887
"""Edits may back-date a set to the earliest known tobacco issues."""


class NewSet(Handler):
    """A proposed new set; approving it also creates its base series."""

    KIND = EntityKind.SET
    TABLE = 'set'
    FIELDS = (
        Field('name', partial(validators.text, min_length=3, max_length=255),
              required=True),
        Field('year', partial(validators.integer, min_value=MIN_YEAR,
                              max_value=MAX_YEAR),
              required=True),
        Field('sport', partial(validators.text, min_length=2, max_length=50),
              required=True),
        Field('manufacturer', partial(validators.text, max_length=100)),
        Field('description', partial(validators.text, max_length=5000)),
    )

    def target_key(self, fields: Dict[str, Any],
                   parent: Optional[ParentReference]) -> str:
        return f'{normalize_name(fields["name"])}|{fields["year"]}'

    def apply(self, submission: Submission, parent_id: Optional[int],
              reviewer_id: int) -> int:
        session = current_session()
        fields = submission.proposed_fields
        now = get_tzaware_utc_now()
        card_set = models.Set(
            name=fields['name'],
            year=fields['year'],
            sport=fields['sport'],
            organization_id=entities.organization_for_sport(fields['sport']),
            manufacturer_id=entities.manufacturer_by_name(
                fields.get('manufacturer')
            ),
            description=fields.get('description'),
            slug=entities.unique_slug(models.Set,
                                      slugify(fields['year'], fields['name'])),
            card_count=0,
            series_count=1,
            is_complete=False,
            created=now
        )
        session.add(card_set)
        session.flush()

        base_series = models.Series(
            set_id=card_set.set_id,
            name=fields['name'],
            slug=entities.unique_slug(models.Series, slugify(fields['name']),
                                      set_id=card_set.set_id),
            card_count=0,
            is_base=True,
            created=now
        )
        session.add(base_series)
        session.flush()
        logger.debug('Created set %s with base series %s', card_set.set_id,
                     base_series.series_id)
        return card_set.set_id


class SetEdit(EditHandler):
    """Proposed changes to an existing set."""

    KIND = EntityKind.SET_EDIT
    TABLE = 'set'
    PARENT_TABLE = 'set'
    FIELDS = (
        Field('name', partial(validators.text, min_length=3, max_length=255),
              nullable=False),
        Field('year', partial(validators.integer, min_value=MIN_EDIT_YEAR,
                              max_value=MAX_YEAR),
              nullable=False),
        Field('sport', partial(validators.text, min_length=2, max_length=50)),
        Field('manufacturer', partial(validators.text, max_length=255)),
        Field('description', partial(validators.text, max_length=2000)),
    )

    def current_value(self, row: models.Set, name: str) -> Any:
        if name == 'manufacturer':
            if row.manufacturer_id is None:
                return None
            mfg = current_session().get(models.Manufacturer,
                                        row.manufacturer_id)
            return mfg.name if mfg else None
        return super(SetEdit, self).current_value(row, name)

    def patch_row(self, row: models.Set, patch: Patch) -> Tuple[str, ...]:
        written = patch.without('manufacturer').apply_to(row)
        if 'manufacturer' in patch:
            row.manufacturer_id = \
                entities.manufacturer_by_name(patch['manufacturer'])
            written += ('manufacturer_id',)
        if 'sport' in patch:
            row.organization_id = \
                entities.organization_for_sport(patch['sport'])
            written += ('organization_id',)
        if 'name' in patch or 'year' in patch:
            row.slug = entities.unique_slug(models.Set,
                                            slugify(row.year, row.name),
                                            exclude_id=row.set_id)
            written += ('slug',)
        return written
