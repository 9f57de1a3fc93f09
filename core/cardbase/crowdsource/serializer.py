"""JSON serialization for the contribution pipeline."""

import json
from datetime import datetime, date
from enum import Enum
from typing import Any

from dataclasses import asdict
from dateutil.parser import isoparse

from .domain import Submission, ContributorStats, Agent, agent_factory


class CrowdsourceJSONEncoder(json.JSONEncoder):
    """Encodes domain objects in this package for serialization."""

    def default(self, obj: object) -> Any:
        """Look for domain objects, and use their dict-coercion methods."""
        if isinstance(obj, Submission):
            data = asdict(obj)
            data['__type__'] = 'submission'
        elif isinstance(obj, ContributorStats):
            data = asdict(obj)
            data['__type__'] = 'stats'
        elif isinstance(obj, Agent):
            data = asdict(obj)
            data['__type__'] = 'agent'
        elif isinstance(obj, Enum):
            data = obj.value
        elif isinstance(obj, datetime):     # Check before date; a subclass.
            data = {'__type__': 'datetime', 'value': obj.isoformat()}
        elif isinstance(obj, date):
            data = {'__type__': 'date', 'value': obj.isoformat()}
        else:
            data = super(CrowdsourceJSONEncoder, self).default(obj)
        return data


class CrowdsourceJSONDecoder(json.JSONDecoder):
    """Decode tagged dates and domain objects from JSON data.

    Only values that the encoder tagged are decoded. Plain strings are always
    returned as strings, even when they look like dates.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        """Pass :func:`object_hook` to the base constructor."""
        kwargs['object_hook'] = kwargs.get('object_hook', self.object_hook)
        super(CrowdsourceJSONDecoder, self).__init__(*args, **kwargs)

    def object_hook(self, obj: dict, **extra: Any) -> Any:
        """Decode dates and domain objects in this package."""
        if '__type__' in obj:
            if obj['__type__'] == 'datetime':
                return isoparse(obj['value'])
            elif obj['__type__'] == 'date':
                return isoparse(obj['value']).date()
            elif obj['__type__'] == 'submission':
                obj.pop('__type__')
                return Submission(**obj)
            elif obj['__type__'] == 'stats':
                obj.pop('__type__')
                return ContributorStats(**obj)
            elif obj['__type__'] == 'agent':
                obj.pop('__type__')
                return agent_factory(**obj)
        return obj


def dumps(obj: Any) -> str:
    """Generate JSON from a Python object."""
    return json.dumps(obj, cls=CrowdsourceJSONEncoder)


def loads(data: str) -> Any:
    """Load a Python object from JSON."""
    return json.loads(data, cls=CrowdsourceJSONDecoder)
