"""Per-kind handlers that validate and apply submissions."""

from typing import Dict

from ..domain.submission import EntityKind
from .base import Handler, EditHandler, Field
from .cards import NewCard, CardEdit
from .players import NewPlayer, PlayerEdit, NewPlayerAlias, PlayerTeamChange
from .series import NewSeries
from .sets import NewSet, SetEdit
from .teams import NewTeam, TeamEdit

HANDLERS: Dict[EntityKind, Handler] = {
    handler.KIND: handler for handler in (
        NewSet(), SetEdit(), NewSeries(), NewCard(), CardEdit(), NewPlayer(),
        PlayerEdit(), NewPlayerAlias(), PlayerTeamChange(), NewTeam(),
        TeamEdit()
    )
}


def get_handler(kind: EntityKind) -> Handler:
    """Get the handler for submissions of ``kind``."""
    return HANDLERS[kind]
