from flask import Blueprint

# Create blueprint
garden_bp = Blueprint('garden', __name__)

# Import routes after creating the blueprint to avoid circular imports
from . import routes  # noqa
