"""Composition root: config, logging, database and services.

The UI layer builds one Application at start-up and asks it for services
bound to a fresh session per unit of work.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from contentieux.config import configure_logging, load_config
from contentieux.data.db import get_engine, get_session_factory, init_db
from contentieux.services.affaire_service import AffaireService
from contentieux.services.mandat_service import MandatService

logger = logging.getLogger(__name__)


@dataclass
class Application:
    config: dict
    engine: Engine
    session_factory: sessionmaker

    @contextmanager
    def session(self):
        with self.session_factory() as session:
            yield session

    @contextmanager
    def affaires(self):
        """AffaireService bound to a session closed on exit."""
        with self.session() as session:
            yield AffaireService.from_session(session)

    @contextmanager
    def mandats(self):
        """MandatService bound to a session closed on exit."""
        with self.session() as session:
            yield MandatService.from_session(session)


def create_app(config_path: str | None = None, database_url: str | None = None) -> Application:
    """Load the config, set up logging, create the schema and return the Application."""
    config = load_config(config_path)
    configure_logging(config)
    if database_url:
        config["database"]["url"] = database_url

    engine = init_db(get_engine(config["database"]["url"]))
    logger.info("Base de données prête (%s)", engine.url.render_as_string(hide_password=True))
    return Application(config=config, engine=engine, session_factory=get_session_factory(engine))
