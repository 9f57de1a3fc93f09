"""Create the catalog and contribution tables, and add the organizations."""

import argparse
import logging

from flask import Flask

from cardbase.crowdsource import init_app
from cardbase.crowdsource.services import catalog
from cardbase.crowdsource.services.catalog import models

logger = logging.getLogger(__name__)

ORGANIZATIONS = [
    ('Major League Baseball', 'MLB'),
    ('National Football League', 'NFL'),
    ('National Basketball Association', 'NBA'),
    ('National Hockey League', 'NHL'),
    ('Major League Soccer', 'MLS'),
]

parser = argparse.ArgumentParser(description=__doc__)
parser.add_argument('--uri', help='Database URI; defaults to the'
                                  ' CATALOG_DATABASE_URI environment variable')
parser.add_argument('--drop', action='store_true',
                    help='Drop existing tables first')
args = parser.parse_args()

app = Flask('cardbase.crowdsource')
if args.uri:
    app.config['CATALOG_DATABASE_URI'] = args.uri
init_app(app)

with app.app_context():
    if args.drop:
        catalog.drop_all()
    catalog.create_all()
    with catalog.transaction() as session:
        for name, abbreviation in ORGANIZATIONS:
            exists = session.query(models.Organization) \
                .filter(models.Organization.abbreviation == abbreviation) \
                .first()
            if exists is None:
                session.add(models.Organization(name=name,
                                                abbreviation=abbreviation))
                logger.info('Added organization %s', abbreviation)
