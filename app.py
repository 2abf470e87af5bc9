from flask import Flask, jsonify
from config import get_config
from extensions import db, migrate
import logging
from logging.handlers import RotatingFileHandler
import os

def create_app(config_name=None, impact_calculator=None):
    app = Flask(__name__)

    # Get configuration based on environment or passed parameter
    if config_name:
        from config import config
        app.config.from_object(config[config_name])
    else:
        app.config.from_object(get_config())

    from services.timezone_service import validate_timezone
    if not validate_timezone(app.config.get('APP_TIMEZONE', 'UTC')):
        raise ValueError(f"Unknown APP_TIMEZONE: {app.config.get('APP_TIMEZONE')}")

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models to register them with SQLAlchemy
    from models import (User, Activity, UserAchievement, CommunityChallenge,  # noqa: F401
                        ChallengeParticipant, FinancialTransaction, Budget, FinancialGoal)

    # Setup logging
    if app.config.get('LOG_TO_STDOUT'):
        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(app.config.get('LOG_LEVEL', 'INFO'))
        app.logger.addHandler(stream_handler)
        app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))
    elif not app.debug and not app.testing:
        if not os.path.exists('logs'):
            os.mkdir('logs')
        file_handler = RotatingFileHandler('logs/eco_tracker.log', maxBytes=10240, backupCount=10)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)
        app.logger.setLevel(logging.INFO)
        app.logger.info('EcoTracker startup')

    # One calculator (and its signal cache) per application instance
    if impact_calculator is None:
        from services.impact_service import build_impact_calculator
        impact_calculator = build_impact_calculator(app.config)
    app.extensions['impact_calculator'] = impact_calculator

    # Register blueprints
    from routes.api import api_bp
    from routes.finance import finance_bp

    app.register_blueprint(api_bp, url_prefix='/api')
    app.register_blueprint(finance_bp, url_prefix='/finance')

    # Main route
    @app.route('/')
    def index():
        return jsonify({'name': 'EcoTracker', 'status': 'ok'})

    # Error handlers
    from services.exceptions import ImpactCalculationError, FinanceValidationError

    @app.errorhandler(ImpactCalculationError)
    def impact_error(error):
        app.logger.info(f'Rejected activity: {error}')
        return jsonify({'success': False, 'message': str(error)}), 400

    @app.errorhandler(FinanceValidationError)
    def finance_error(error):
        return jsonify({'success': False, 'message': str(error)}), 400

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({'success': False, 'message': 'Not found'}), 404

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return jsonify({'success': False, 'message': 'Internal server error'}), 500

    return app
