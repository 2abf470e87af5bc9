import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    # Security settings
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    SERVER_NAME = os.environ.get('SERVER_NAME')
    APPLICATION_ROOT = os.environ.get('APPLICATION_ROOT', '/')
    PREFERRED_URL_SCHEME = os.environ.get('PREFERRED_URL_SCHEME', 'http')

    # Database configuration
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///eco_tracker.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Session configuration
    SESSION_COOKIE_SECURE = False
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    PERMANENT_SESSION_LIFETIME = int(os.environ.get('SESSION_LIFETIME', 86400))  # 24 hours default

    # Day boundaries for streaks and analytics are taken in this timezone
    APP_TIMEZONE = os.environ.get('APP_TIMEZONE', 'UTC')

    # Impact calculation
    DEFAULT_REGION = os.environ.get('DEFAULT_REGION', 'IN')
    ENHANCED_CALCULATIONS = os.environ.get('ENHANCED_CALCULATIONS', 'False').lower() == 'true'
    GRID_INTENSITY_API_URL = os.environ.get('GRID_INTENSITY_API_URL', 'https://api.carbonintensity.org.uk/regional/regionid/{region_id}')
    FUEL_PRICE_API_URL = os.environ.get('FUEL_PRICE_API_URL')
    EXTERNAL_SIGNAL_TIMEOUT = float(os.environ.get('EXTERNAL_SIGNAL_TIMEOUT', 3))  # seconds
    GRID_INTENSITY_TTL = int(os.environ.get('GRID_INTENSITY_TTL', 3600))  # 1 hour
    FUEL_PRICE_TTL = int(os.environ.get('FUEL_PRICE_TTL', 86400))  # 24 hours
    SIGNAL_FAILURE_BACKOFF = int(os.environ.get('SIGNAL_FAILURE_BACKOFF', 60))  # seconds

    # Scoring weights
    XP_BASE = float(os.environ.get('XP_BASE', 10))
    XP_CO2_WEIGHT = float(os.environ.get('XP_CO2_WEIGHT', 2))
    XP_COST_WEIGHT = float(os.environ.get('XP_COST_WEIGHT', 0.01))
    LEADERBOARD_CO2_WEIGHT = float(os.environ.get('LEADERBOARD_CO2_WEIGHT', 10))
    LEADERBOARD_STREAK_WEIGHT = float(os.environ.get('LEADERBOARD_STREAK_WEIGHT', 50))
    LEADERBOARD_DIVERSITY_WEIGHT = float(os.environ.get('LEADERBOARD_DIVERSITY_WEIGHT', 100))
    LEADERBOARD_SIZE = int(os.environ.get('LEADERBOARD_SIZE', 20))

    # Analytics
    ANALYTICS_DEFAULT_DAYS = int(os.environ.get('ANALYTICS_DEFAULT_DAYS', 30))
    ACTIVITIES_PER_PAGE = int(os.environ.get('ACTIVITIES_PER_PAGE', 50))

    # Logging
    LOG_TO_STDOUT = os.environ.get('LOG_TO_STDOUT', 'False').lower() == 'true'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()


    # Debug mode - automatically set based on environment
    @property
    def DEBUG(self):
        env = os.environ.get('FLASK_ENV', 'development').lower()
        return env == 'development'

    # Testing mode
    TESTING = False

class ProductionConfig(Config):
    DEBUG = False
    SESSION_COOKIE_SECURE = True
    ENHANCED_CALCULATIONS = os.environ.get('ENHANCED_CALCULATIONS', 'True').lower() == 'true'


class DevelopmentConfig(Config):
    DEBUG = True

class TestingConfig(Config):
    TESTING = True
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    ENHANCED_CALCULATIONS = False
    FUEL_PRICE_API_URL = None

config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': Config
}

def get_config():
    """Get configuration based on environment variable"""
    env = os.environ.get('FLASK_ENV', 'development').lower()
    return config.get(env, config['default'])
