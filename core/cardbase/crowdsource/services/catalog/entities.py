"""Lookups and helpers for catalog rows."""

import logging
from typing import Any, Dict, Iterable, Optional, Type

from sqlalchemy import func

from ...domain.util import normalize_name
from . import models
from .exceptions import NoSuchEntity
from .util import current_session

logger = logging.getLogger(__name__)

SPORT_ORGANIZATIONS = {
    'baseball': 'MLB',
    'football': 'NFL',
    'basketball': 'NBA',
    'hockey': 'NHL',
    'soccer': 'MLS',
}
"""Default organization abbreviation for each sport."""

MODELS: Dict[str, Type[models.Base]] = {
    'set': models.Set,
    'series': models.Series,
    'card': models.Card,
    'player': models.Player,
    'team': models.Team,
}
"""Catalog tables that can be the parent or target of a submission."""


def get_row(table: str, entity_id: int, for_update: bool = False) -> Any:
    """
    Get a catalog row by primary key.

    Parameters
    ----------
    table : str
        One of the keys of :const:`MODELS`.
    entity_id : int
    for_update : bool
        If ``True``, the row is locked until the end of the transaction.

    Raises
    ------
    :class:`.NoSuchEntity`

    """
    model = MODELS[table]
    row = current_session().get(model, entity_id, with_for_update=for_update)
    if row is None:
        raise NoSuchEntity(f'No {table} with id {entity_id}')
    return row


def exists(table: str, entity_id: int) -> bool:
    """Check whether a catalog row exists."""
    return current_session().get(MODELS[table], entity_id) is not None


def unique_slug(model: Type[models.Base], base: str,
                exclude_id: Optional[int] = None, **scope: Any) -> str:
    """
    Generate a slug that is not yet used by ``model``.

    Tries ``base``, then ``base-1``, ``base-2``, and so on. ``scope`` narrows
    the uniqueness check, e.g. to series within a single set.
    """
    base = base or 'untitled'
    primary_key = model.__mapper__.primary_key[0]
    query = current_session().query(model.slug).filter_by(**scope)
    if exclude_id is not None:
        query = query.filter(primary_key != exclude_id)
    taken = {slug for slug, in query.filter(model.slug.like(f'{base}%'))}
    candidate = base
    suffix = 0
    while candidate in taken:
        suffix += 1
        candidate = f'{base}-{suffix}'
    return candidate


def organization_for_sport(sport: Optional[str]) -> Optional[int]:
    """Find the organization that governs ``sport``, if any."""
    if not sport:
        return None
    abbreviation = SPORT_ORGANIZATIONS.get(sport.strip().lower(), sport)
    org = current_session().query(models.Organization) \
        .filter((models.Organization.abbreviation == abbreviation)
                | (models.Organization.name == sport)) \
        .first()
    if org is None:
        logger.debug('No organization for sport %s', sport)
        return None
    return org.organization_id


def manufacturer_by_name(name: Optional[str]) -> Optional[int]:
    """Find a manufacturer by (case-insensitive) name."""
    if not name:
        return None
    mfg = current_session().query(models.Manufacturer) \
        .filter(func.lower(models.Manufacturer.name) == name.strip().lower()) \
        .first()
    if mfg is None:
        logger.debug('No manufacturer named %s', name)
        return None
    return mfg.manufacturer_id


def player_name_taken(first_name: str, last_name: str) -> bool:
    """Whether a player with the same (normalized) name already exists."""
    wanted = normalize_name(first_name, last_name)
    candidates: Iterable = current_session() \
        .query(models.Player.first_name, models.Player.last_name)
    return any(normalize_name(first, last) == wanted
               for first, last in candidates)


def team_name_taken(name: str) -> bool:
    """Whether a team with the same (normalized) name already exists."""
    wanted = normalize_name(name)
    names: Iterable = current_session().query(models.Team.name)
    return any(normalize_name(existing) == wanted for existing, in names)


def get_player_team(player_id: int, team_id: int) \
        -> Optional[models.PlayerTeam]:
    """Get the link between a player and a team, if there is one."""
    return current_session().query(models.PlayerTeam) \
        .filter_by(player_id=player_id, team_id=team_id) \
        .first()


def increment(model: Type[models.Base], entity_id: int, column: str,
              by: int = 1) -> None:
    """Adjust a counter column with a single SQL expression update."""
    primary_key = model.__mapper__.primary_key[0]
    attr = getattr(model, column)
    current_session().query(model) \
        .filter(primary_key == entity_id) \
        .update({attr: attr + by}, synchronize_session=False)
