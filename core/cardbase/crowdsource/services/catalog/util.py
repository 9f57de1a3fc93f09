"""Utility classes and functions for :mod:`.services.catalog`."""

import logging
from contextlib import contextmanager
from typing import Optional, Generator

from flask import Flask
import sqlalchemy.types as types
from sqlalchemy.orm.session import Session
from flask_sqlalchemy import SQLAlchemy

from .exceptions import CatalogBaseException, TransactionFailed
from ...exceptions import CrowdsourceError
from ... import serializer


class CatalogSQLAlchemy(SQLAlchemy):
    """SQLAlchemy integration for the catalog database."""

    def init_app(self, app: Flask) -> None:
        """Set default configuration."""
        app.config.setdefault(
            'SQLALCHEMY_DATABASE_URI',
            app.config.get('CATALOG_DATABASE_URI', 'sqlite://')
        )
        app.config.setdefault('SQLALCHEMY_TRACK_MODIFICATIONS', False)
        if app.config['SQLALCHEMY_DATABASE_URI'].startswith('mysql'):
            options = app.config.setdefault('SQLALCHEMY_ENGINE_OPTIONS', {})
            options.setdefault('json_serializer', serializer.dumps)
            options.setdefault('json_deserializer', serializer.loads)
        super(CatalogSQLAlchemy, self).init_app(app)


db: SQLAlchemy = CatalogSQLAlchemy()


logger = logging.getLogger(__name__)


class SQLiteJSON(types.TypeDecorator):
    """A SQLite-friendly JSON data type."""

    impl = types.TEXT
    cache_ok = True

    def process_bind_param(self, value: Optional[dict], dialect: str) -> str:
        """Serialize a dict to JSON."""
        if value is not None:
            value = serializer.dumps(value)
        return value

    def process_result_value(self, value: str, dialect: str) -> Optional[dict]:
        """Deserialize JSON content to a dict."""
        if value is not None:
            value = serializer.loads(value)
        return value


# SQLite does not support JSON, so we extend JSON to use our custom data type
# as a variant for the 'sqlite' dialect.
FriendlyJSON = types.JSON().with_variant(SQLiteJSON, 'sqlite')


def current_session() -> Session:
    """Get/create :class:`.Session` for this context."""
    return db.session()


@contextmanager
def transaction() -> Generator:
    """Context manager for database transaction."""
    session = current_session()
    try:
        yield session
        session.commit()
    except (CatalogBaseException, CrowdsourceError) as e:
        logger.debug('Command failed, rolling back: %s', str(e))
        session.rollback()
        raise   # Propagate exceptions raised from this package.
    except Exception as e:
        logger.debug('Command failed, rolling back: %s', str(e))
        session.rollback()
        raise TransactionFailed('Failed to execute transaction') from e
