# Blueprint registration module

# Import all blueprints
from .api import api_bp
from .finance import finance_bp

__all__ = [
    'api_bp',
    'finance_bp',
]
