import logging

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(getattr(logging, str(flask_app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)

    # Collaborators: the age lookup client and the configured name source
    from guessage.services.age_oracle import age_oracle
    from guessage.services.names import build_name_source
    age_oracle.init_app(flask_app)
    build_name_source(flask_app)

    from guessage.main import main
    flask_app.register_blueprint(main)

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        import guessage.models  # noqa: F401
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            added = _seed_names(flask_app)
            print(f'Database has been reset and seeded with {added} names!')

    @click.command('seed-names')
    @click.option('--path', default=None, help='Names file, one per line (defaults to NAMES_FILE).')
    def seed_names_command(path):
        """Adds any missing names from the names file to the subject_name table."""
        with flask_app.app_context():
            added = _seed_names(flask_app, path)
            print(f'Added {added} names.')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(seed_names_command)

    return flask_app


def _seed_names(flask_app, path=None):
    from guessage.models import SubjectName
    from guessage.services.names import load_names_file

    existing = {row.name for row in SubjectName.query.all()}
    added = 0
    for name in load_names_file(path or flask_app.config['NAMES_FILE']):
        if name not in existing:
            db.session.add(SubjectName(name=name))
            existing.add(name)
            added += 1
    db.session.commit()
    flask_app.logger.info(f"[seed] added {added} subject names")
    return added
