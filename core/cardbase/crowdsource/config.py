"""Crowdsource pipeline configuration parameters."""

from os import environ
from typing import Any
import warnings

from flask import current_app, has_app_context

LOGLEVEL = int(environ.get('LOGLEVEL', '20'))
"""
Logging verbosity.

See `https://docs.python.org/3/library/logging.html#levels`_.
"""

# --- DATABASE CONFIGURATION ---

CATALOG_DATABASE_URI = environ.get('CATALOG_DATABASE_URI', 'sqlite:///')
"""Full database URI for the catalog (and submission) tables."""

SQLALCHEMY_DATABASE_URI = CATALOG_DATABASE_URI
"""Full database URI for the catalog."""

SQLALCHEMY_TRACK_MODIFICATIONS = False
"""Track modifications feature should always be disabled."""

if CATALOG_DATABASE_URI.startswith('sqlite'):
    warnings.warn('Using SQLite for the catalog; concurrent reviews are'
                  ' serialized by the database file lock.')

# --- REVIEW POLICY ---

TRUSTED_ROLES = [
    role.strip() for role
    in environ.get('TRUSTED_ROLES', 'admin,superadmin,data_admin').split(',')
    if role.strip()
]
"""
Roles that may review submissions.

Submissions from these roles bypass the review queue (auto-approval).
"""

AUTO_APPROVE_TRUST_LEVEL = environ.get('AUTO_APPROVE_TRUST_LEVEL') or None
"""
Minimum trust level at which ordinary contributors are auto-approved.

One of ``novice``, ``contributor``, ``trusted``, ``expert``, ``master``. If
not set, only :const:`TRUSTED_ROLES` are auto-approved.
"""

REJECT_STALE_EDITS = bool(int(environ.get('REJECT_STALE_EDITS', '1')))
"""
Refuse to approve an edit if the entity changed since it was submitted.

When enabled, the snapshot taken at submission time is compared to the live
catalog row and a mismatch raises :class:`.exceptions.Conflict`.
"""

MIN_REJECT_NOTES_LENGTH = int(environ.get('MIN_REJECT_NOTES_LENGTH', '1'))
"""Minimum length of the reviewer's explanation when rejecting."""

MAX_NOTES_LENGTH = int(environ.get('MAX_NOTES_LENGTH', '2000'))
"""Maximum length of submission and review notes."""

# --- PAGINATION ---

PAGE_SIZE = int(environ.get('PAGE_SIZE', '50'))
"""Default number of submissions per page."""

MAX_PAGE_SIZE = int(environ.get('MAX_PAGE_SIZE', '100'))
"""Upper bound on the number of submissions per page."""


def get_setting(key: str) -> Any:
    """
    Get a configuration value for the current application.

    Falls back to the module-level default defined above when there is no
    application context, or the application does not set ``key``.
    """
    default = globals()[key]
    if has_app_context():
        return current_app.config.get(key, default)
    return default
