"""
Provides the base handler classes.

Each :class:`.EntityKind` has exactly one handler, which knows:

- which fields a submission of that kind may propose, and how to clean and
  validate them (:meth:`Handler.validate`);
- what the submission depends on (its parent), and whether that parent may
  be a submission that has not been approved yet;
- how to describe the logical target of the submission, for detecting
  duplicate pending submissions (:meth:`Handler.target_key`);
- how to apply an approved submission to the catalog (:meth:`Handler.apply`).

Handlers are stateless. The review engine looks them up by kind in
:data:`.handlers.HANDLERS` and invokes them uniformly.
"""

import logging
from typing import Any, Callable, ClassVar, Dict, Iterable, Mapping, \
    Optional, Tuple

from dataclasses import dataclass, field

from ..domain.patch import Patch
from ..domain.submission import EntityKind, ParentReference, Submission
from ..exceptions import NotFound, ValidationError
from ..services import catalog
from ..services.catalog import entities

logger = logging.getLogger(__name__)

Cleaner = Callable[[str, Any], Any]


@dataclass(frozen=True)
class Field:
    """A field that a submission may propose."""

    name: str
    clean: Cleaner
    """Validates and normalizes a non-null value; see :mod:`.validators`."""

    required: bool = field(default=False)
    nullable: bool = field(default=True)
    """Whether the field may be explicitly set to ``None``."""


class Handler:
    """Base class for entity kind handlers."""

    KIND: ClassVar[EntityKind]
    FIELDS: ClassVar[Tuple[Field, ...]] = ()

    TABLE: ClassVar[Optional[str]] = None
    """Catalog table that approved submissions write to."""

    PARENT_TABLE: ClassVar[Optional[str]] = None
    """Catalog table that ``parent.entity_id`` refers to."""

    PARENT_KIND: ClassVar[Optional[EntityKind]] = None
    """Kind of submission that may stand in for a parent not yet approved."""

    PARENT_REQUIRED: ClassVar[bool] = False

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.FIELDS)

    def clean(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """Validate and normalize proposed fields, one at a time."""
        unknown = sorted(set(fields) - set(self.field_names))
        if unknown:
            raise ValidationError(f'Unknown field for {self.KIND.value}'
                                  f' submissions', unknown[0])
        cleaned: Dict[str, Any] = {}
        for definition in self.FIELDS:
            if definition.name not in fields:
                if definition.required:
                    raise ValidationError('Is required', definition.name)
                continue
            value = fields[definition.name]
            if value is None:
                if definition.required or not definition.nullable:
                    raise ValidationError('May not be null', definition.name)
                cleaned[definition.name] = None
                continue
            cleaned[definition.name] = definition.clean(definition.name, value)
        return cleaned

    def validate(self, fields: Mapping[str, Any],
                 parent: Optional[ParentReference]) -> Dict[str, Any]:
        """
        Validate a proposed submission.

        Parameters
        ----------
        fields : dict
            Proposed fields, as provided by the submitter.
        parent : :class:`.ParentReference` or None

        Returns
        -------
        dict
            The cleaned proposed fields, to be stored on the submission.

        Raises
        ------
        :class:`.ValidationError`
            Raised if a field is missing, malformed or out of range, or if
            the parent is of the wrong kind.
        :class:`.NotFound`
            Raised if the parent (or another referenced entity) does not
            exist.

        """
        cleaned = self.clean(fields)
        self.check_parent(parent)
        self.check(cleaned, parent)
        return cleaned

    def check_parent(self, parent: Optional[ParentReference]) -> None:
        """Verify that the parent reference is acceptable for this kind."""
        if parent is None or parent.is_empty:
            if self.PARENT_REQUIRED:
                raise ValidationError('Is required', 'parent')
            return
        if self.PARENT_TABLE is None:
            raise ValidationError(f'{self.KIND.value} submissions do not'
                                  f' have a parent', 'parent')
        if parent.entity_id is not None:
            if not entities.exists(self.PARENT_TABLE, parent.entity_id):
                raise NotFound(f'No {self.PARENT_TABLE} with id'
                               f' {parent.entity_id}')
            return
        if self.PARENT_KIND is None:
            raise ValidationError(f'Must be an existing {self.PARENT_TABLE}',
                                  'parent')
        try:
            parent_submission = catalog.get_submission(parent.submission_id)
        except catalog.NoSuchSubmission as e:
            raise NotFound(f'No submission with id'
                           f' {parent.submission_id}') from e
        if parent_submission.entity_kind is not self.PARENT_KIND:
            raise ValidationError(f'Must be a {self.PARENT_KIND.value}'
                                  f' submission', 'parent')
        if parent_submission.is_rejected:
            raise ValidationError('Parent submission was rejected', 'parent')

    def check(self, fields: Dict[str, Any],
              parent: Optional[ParentReference]) -> None:
        """Perform checks that involve more than one field, or the catalog."""

    def creates(self, fields: Mapping[str, Any]) -> bool:
        """Whether approving a submission with ``fields`` creates a row."""
        return not self.KIND.is_edit

    def target_key(self, fields: Mapping[str, Any],
                   parent: Optional[ParentReference]) -> str:
        """Describe the logical target of the submission."""
        raise NotImplementedError('Must be implemented by child class')

    def snapshot(self, fields: Mapping[str, Any],
                 parent: Optional[ParentReference]) \
            -> Optional[Dict[str, Any]]:
        """Live values of the proposed fields, for edit kinds."""
        return None

    def is_stale(self, submission: Submission) -> bool:
        """Whether the entity changed after ``submission`` was made."""
        return False

    def apply(self, submission: Submission, parent_id: Optional[int],
              reviewer_id: int) -> Optional[int]:
        """
        Apply an approved submission to the catalog.

        Parameters
        ----------
        submission : :class:`.Submission`
        parent_id : int or None
            The resolved (concrete) parent entity id.
        reviewer_id : int

        Returns
        -------
        int or None
            The id of the catalog row that was created, if any.

        """
        raise NotImplementedError('Must be implemented by child class')


def parent_key(parent: Optional[ParentReference],
               kind: Optional[EntityKind] = None) -> str:
    """
    Describe a parent reference for use in a target key.

    A parent can be referred to by the submission that proposed it or, once
    that submission is approved, by the entity it created. Both are described
    by the submission, so that the key does not depend on which was used.

    Parameters
    ----------
    parent : :class:`.ParentReference` or None
    kind : :class:`.EntityKind`
        The kind of submission that creates the parent entity.

    Returns
    -------
    str

    """
    if parent is None or parent.is_empty:
        return '-'
    if parent.entity_id is not None:
        submission_id = None
        if kind is not None:
            submission_id = catalog.find_creating_submission(kind,
                                                             parent.entity_id)
        if submission_id is None:
            return f'entity:{parent.entity_id}'
        return f'submission:{submission_id}'
    return f'submission:{parent.submission_id}'


class EditHandler(Handler):
    """
    Base class for handlers of kinds that patch an existing entity.

    The parent of an edit is the entity being edited. Only fields present in
    the proposal are written (see :class:`.Patch`).
    """

    PARENT_REQUIRED = True

    COLUMNS: ClassVar[Dict[str, str]] = {}
    """Field names that differ from the name of the column they update."""

    def validate(self, fields: Mapping[str, Any],
                 parent: Optional[ParentReference]) -> Dict[str, Any]:
        """Validate the edit, and keep only the fields that would change."""
        cleaned = super(EditHandler, self).validate(fields, parent)
        row = entities.get_row(self.TABLE, parent.entity_id)
        changes = Patch(cleaned).changes(self.current_values(row, cleaned))
        if not changes:
            raise ValidationError('No changes proposed')
        return changes.to_dict()

    def target_key(self, fields: Mapping[str, Any],
                   parent: Optional[ParentReference]) -> str:
        return str(parent.entity_id)

    def current_value(self, row: Any, name: str) -> Any:
        """Get the live value of field ``name`` from a catalog row."""
        return getattr(row, self.COLUMNS.get(name, name))

    def current_values(self, row: Any, names: Iterable[str]) \
            -> Dict[str, Any]:
        return {name: self.current_value(row, name) for name in names}

    def snapshot(self, fields: Mapping[str, Any],
                 parent: Optional[ParentReference]) -> Dict[str, Any]:
        row = entities.get_row(self.TABLE, parent.entity_id)
        return self.current_values(row, fields)

    def is_stale(self, submission: Submission) -> bool:
        if submission.previous_fields is None:
            return False
        row = entities.get_row(self.TABLE, submission.parent_entity_id)
        live = self.current_values(row, submission.previous_fields)
        return live != submission.previous_fields

    def apply(self, submission: Submission, parent_id: Optional[int],
              reviewer_id: int) -> None:
        row = entities.get_row(self.TABLE, parent_id, for_update=True)
        patch = submission.patch
        written = self.patch_row(row, patch)
        logger.debug('Patched %s %s: %s', self.TABLE, parent_id,
                     ', '.join(written))
        return None

    def patch_row(self, row: Any, patch: Patch) -> Tuple[str, ...]:
        """Write present fields to ``row``; extended by child classes."""
        return patch.apply_to(row, self.COLUMNS)
