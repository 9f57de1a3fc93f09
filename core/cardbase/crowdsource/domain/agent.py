"""Data structures for agents."""

import hashlib
from typing import Any

from dataclasses import dataclass, field

__all__ = ('Agent', 'User', 'System', 'agent_factory')


@dataclass
class Agent:
    """
    Base class for agents in the contribution pipeline.

    An agent is an actor/system that submits or reviews proposed changes.
    Identity and role are supplied by the authentication layer.
    """

    native_id: int
    """Type-specific identifier for the agent."""

    def __post_init__(self) -> None:
        """Set derivative fields."""
        self.agent_type = self.__class__.get_agent_type()
        self.agent_identifier = self.get_agent_identifier()

    @classmethod
    def get_agent_type(cls) -> str:
        """Get the name of the instance's class."""
        return cls.__name__

    def get_agent_identifier(self) -> str:
        """
        Get the unique identifier for this agent instance.

        Based on both the agent type and native ID.
        """
        h = hashlib.new('sha1')
        h.update(b'%s:%s' % (self.agent_type.encode('utf-8'),
                             str(self.native_id).encode('utf-8')))
        return h.hexdigest()

    def __eq__(self, other: Any) -> bool:
        """Equality comparison for agents based on type and identifier."""
        if not isinstance(other, self.__class__):
            return False
        return self.agent_identifier == other.agent_identifier


@dataclass(eq=False)
class User(Agent):
    """A (human) end user."""

    role: str = field(default='user')
    """Role granted by the identity provider (e.g. ``user``, ``admin``)."""

    username: str = field(default_factory=str)
    email: str = field(default_factory=str)
    agent_type: str = field(default_factory=str)
    agent_identifier: str = field(default_factory=str)


@dataclass(eq=False)
class System(Agent):
    """This application, acting on its own behalf (e.g. scripts)."""

    role: str = field(default='system')
    agent_type: str = field(default_factory=str)
    agent_identifier: str = field(default_factory=str)


_agent_types = {
    User.get_agent_type(): User,
    System.get_agent_type(): System,
}


def agent_factory(**data: Any) -> Agent:
    """Instantiate a subclass of :class:`.Agent`."""
    agent_type = data.pop('agent_type', None) or User.get_agent_type()
    if agent_type not in _agent_types:
        raise ValueError(f'No such agent type: {agent_type}')
    data.pop('agent_identifier', None)
    return _agent_types[agent_type](**data)
