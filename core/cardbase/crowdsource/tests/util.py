from contextlib import contextmanager
from typing import Optional

from flask import Flask

from .. import core
from ..services import catalog
from ..services.catalog import models


@contextmanager
def in_memory_db(app: Optional[Flask] = None):
    """Provide an in-memory sqlite database for testing purposes."""
    if app is None:
        app = Flask('foo')
    app.config['CATALOG_DATABASE_URI'] = 'sqlite://'
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    with app.app_context():
        core.init_app(app)
        catalog.create_all()
        try:
            yield catalog.current_session()
        except Exception:
            raise
        finally:
            catalog.drop_all()


def seed_catalog(session) -> None:
    """Add the organizations, a manufacturer, and a couple of teams."""
    session.add_all([
        models.Organization(organization_id=1, name='Major League Baseball',
                            abbreviation='MLB'),
        models.Organization(organization_id=2,
                            name='National Football League',
                            abbreviation='NFL'),
        models.Manufacturer(manufacturer_id=1, name='Topps'),
        models.Team(team_id=1, name='New York Yankees', city='New York',
                    abbreviation='NYY', organization_id=1,
                    slug='new-york-yankees'),
        models.Team(team_id=2, name='Boston Red Sox', city='Boston',
                    abbreviation='BOS', organization_id=1,
                    slug='boston-red-sox'),
    ])
    session.commit()
