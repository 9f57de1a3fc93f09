"""
Typed partial updates.

A :class:`Patch` distinguishes three states for every field of an entity:

- absent: the field is not in the patch, and the current value is retained;
- explicit null: the field is in the patch with the value ``None``, and the
  current value is cleared;
- a value: the field is in the patch, and the current value is replaced.

Only present fields are ever written by :meth:`Patch.apply_to`.
"""

from typing import Any, Dict, Iterator, Mapping, Optional, Tuple


class _Absent:
    """Marker for a field that was not included in a patch."""

    _instance: Optional['_Absent'] = None

    def __new__(cls) -> '_Absent':
        if cls._instance is None:
            cls._instance = super(_Absent, cls).__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return 'ABSENT'


ABSENT = _Absent()


class Patch(Mapping):
    """An immutable, sparse mapping of field names to new values."""

    def __init__(self, values: Optional[Mapping[str, Any]] = None) -> None:
        self._values: Dict[str, Any] = dict(values or {})
        for name, value in list(self._values.items()):
            if value is ABSENT:
                del self._values[name]

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f'Patch({self._values!r})'

    def get(self, name: str, default: Any = ABSENT) -> Any:
        """Get the value of ``name``, or :data:`ABSENT` if not present."""
        return self._values.get(name, default)

    def without(self, *names: str) -> 'Patch':
        """Get a copy of this patch with ``names`` removed."""
        return Patch({k: v for k, v in self._values.items()
                      if k not in names})

    def changes(self, current: Mapping[str, Any]) -> 'Patch':
        """Get the subset of this patch that differs from ``current``."""
        return Patch({k: v for k, v in self._values.items()
                      if current.get(k) != v})

    def apply_to(self, target: Any,
                 columns: Optional[Mapping[str, str]] = None) \
            -> Tuple[str, ...]:
        """
        Set present fields as attributes on ``target``.

        Parameters
        ----------
        target : object
            Usually an ORM instance.
        columns : dict
            Optional mapping of patch field names to attribute names, for
            fields whose attribute name differs.

        Returns
        -------
        tuple
            Names of the attributes that were written.

        """
        columns = columns or {}
        written = []
        for name, value in self._values.items():
            attr = columns.get(name, name)
            setattr(target, attr, value)
            written.append(attr)
        return tuple(written)

    def to_dict(self) -> Dict[str, Any]:
        """Get a plain dict of the present fields."""
        return dict(self._values)
