"""ClassLog - Application Factory."""
import logging
import os
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_jwt_extended import JWTManager
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()
limiter = Limiter(key_func=get_remote_address)

def create_app(config_name: str = None) -> Flask:
    """Application factory pattern."""
    app = Flask(__name__)

    # Load configuration
    from classlog.config import get_config
    config_class = get_config(config_name)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    # Configure CORS
    CORS(app, origins=app.config.get('CORS_ORIGINS', ["*"]))

    # Setup logging
    setup_logging(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Setup database
    setup_database(app)

    # QR rotation controller
    setup_session_liveness(app)

    # Add CLI commands
    register_commands(app)

    @app.route('/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'service': 'ClassLog',
            'version': '1.0.0'
        })

    return app

def register_blueprints(app: Flask) -> None:
    """Register all application blueprints."""
    from classlog.api.auth import auth_bp
    from classlog.api.sessions import sessions_bp
    from classlog.api.attendance import attendance_bp
    from classlog.api.statistics import statistics_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(sessions_bp, url_prefix='/api/sessions')
    app.register_blueprint(attendance_bp, url_prefix='/api/attendance')
    app.register_blueprint(statistics_bp, url_prefix='/api/statistics')

def register_error_handlers(app: Flask) -> None:
    """Register error handlers."""
    from classlog.utils.helpers import handle_error
    from classlog.utils.validators import ValidationError
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(ValidationError)
    def validation_error(error):
        return handle_error(error, 400)

    @app.errorhandler(HTTPException)
    def handle_exception(e):
        return handle_error(e.description, e.code)

    @app.errorhandler(Exception)
    def internal_error(error):
        db.session.rollback()
        app.logger.exception('Unhandled error: %s', error)
        return handle_error('Internal server error', 500)

    # JWT error handlers
    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return handle_error('Token has expired', 401)

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return handle_error('Invalid token', 401)

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return handle_error('Authorization token required', 401)

def setup_logging(app: Flask) -> None:
    """Setup application logging."""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.getLogger('classlog').setLevel(level)

    if not app.debug and not app.testing:
        log_file = app.config.get('LOG_FILE', 'logs/classlog.log')
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(level)
        app.logger.addHandler(file_handler)
        logging.getLogger('classlog').addHandler(file_handler)

        app.logger.setLevel(level)
        app.logger.info('ClassLog startup')

def setup_database(app: Flask) -> None:
    """Setup database connections."""
    with app.app_context():
        # Import all models
        from classlog.models import (
            Teacher, TeacherGroup, Student,
            QRSession, AttendanceLog, AttendanceStatus
        )

def setup_session_liveness(app: Flask) -> None:
    """Attach the QR rotation controller to the app."""
    from classlog.services.session_store import SessionStore
    from classlog.services.session_liveness_service import SessionLivenessController
    from classlog.utils.scheduler import ThreadingScheduler

    app.extensions['session_liveness'] = SessionLivenessController(
        store=SessionStore(),
        scheduler=ThreadingScheduler(app),
        interval_seconds=app.config['QR_ROTATION_INTERVAL_SECONDS'],
        grace_period_ms=app.config['QR_GRACE_PERIOD_MS'],
        separator=app.config['QR_TOKEN_SEPARATOR'],
    )

def register_commands(app: Flask) -> None:
    """Register CLI commands."""
    import click

    @app.cli.command('init-db')
    @click.option('--drop', is_flag=True, help='Drop existing tables')
    def init_db(drop):
        """Initialize the database."""
        if drop:
            db.drop_all()
            click.echo('Dropped all tables.')

        db.create_all()
        click.echo('Created all tables.')

    @app.cli.command('seed-db')
    def seed_db():
        """Seed database with sample data."""
        from classlog.services.seed_service import SeedService

        summary = SeedService.seed_all()
        click.echo(
            f"Seeded {summary['teachers']} teacher(s), {summary['students']} student(s), "
            f"{summary['sessions']} session(s)."
        )

    @app.cli.command('student-stats')
    @click.argument('roll_no')
    def student_stats(roll_no):
        """Print per-subject attendance for a student."""
        from classlog.services.statistics_service import StatisticsService

        report, error = StatisticsService.student_report(roll_no)
        if error:
            raise click.ClickException(error)

        click.echo(f"{'Subject':<30} {'Attended':>8} {'Total':>6} {'%':>4} {'Need':>5} {'Skip':>5}")
        for stat in report['subject_stats']:
            click.echo(
                f"{stat['subject']:<30} {stat['attended_sessions']:>8} {stat['total_sessions']:>6} "
                f"{stat['percentage']:>4} {stat['classes_needed_for_75']:>5} {stat['classes_can_skip']:>5}"
            )
        click.echo(f"Overall attendance: {report['overall_attendance']}%")
