import logging

import click
from flask import Flask, jsonify
from flask.cli import AppGroup
from app.config import config


def create_app(config_name='default', overrides=None):
    app = Flask(__name__)
    app.config.from_object(config[config_name])
    if overrides:
        app.config.update(overrides)
    app.logger.setLevel(getattr(logging, app.config.get('LOG_LEVEL', 'INFO'), logging.INFO))

    # Initialize extensions
    from app.extensions import db, init_app
    init_app(app)

    # Import models so their tables are registered
    from auth.models import User  # noqa: F401
    from journal.models import DiaryEntry, FadeSettings  # noqa: F401
    from garden.models import GardenPlant  # noqa: F401

    # Register blueprints
    from auth import auth_bp
    from journal import journal_bp
    from garden import garden_bp
    from users import users_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(journal_bp, url_prefix='/api')
    app.register_blueprint(garden_bp, url_prefix='/api/garden')
    app.register_blueprint(users_bp, url_prefix='/api/users')

    register_error_handlers(app)
    register_commands(app)

    # Create tables
    with app.app_context():
        db.create_all()

    # Simple root endpoint for quick check
    @app.route('/')
    def index():
        return {'message': 'Fading Diary API is running', 'docs': '/apidocs/'}

    return app


def register_error_handlers(app):
    from app.extensions import db
    from journal.errors import FadeError, PersistenceError, ConcurrentUpdateError

    @app.errorhandler(FadeError)
    def handle_fade_error(error):
        if isinstance(error, PersistenceError):
            db.session.rollback()
            app.logger.error('Persistence failure: %s', error)
            message = 'Entry is busy, try again' if isinstance(error, ConcurrentUpdateError) else 'Operation failed'
            return jsonify({'error': message}), error.status_code
        return jsonify({'error': str(error)}), error.status_code


def register_commands(app):
    fade_cli = AppGroup('fade', help='Diary fading maintenance.')
    app.cli.add_command(fade_cli)

    @fade_cli.command('cleanup')
    @click.option('--workers', type=int, default=None, help='Entries to recalculate concurrently.')
    def cleanup_command(workers):
        """Recalculate every fading entry and transform the ones that faded out."""
        from journal.cleanup import run_cleanup
        report = run_cleanup(max_workers=workers)
        summary = report.to_dict()
        click.echo(
            f"{summary['totalProcessed']} processed, "
            f"{summary['fullyFadedEntries']} transformed, "
            f"{summary['recalculatedEntries']} recalculated, "
            f"{summary['failedEntries']} failed"
        )
