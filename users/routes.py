from flask import request, jsonify
from flask_jwt_extended import jwt_required
from flasgger import swag_from
from app.extensions import db
from auth.models import User
from auth.utils import current_user_id
from journal.errors import NotFoundError
from journal.repository import FadeSettingsStore
from users.stats import garden_stats, parse_settings_payload
from . import users_bp

@users_bp.route('/me', methods=['GET'])
@jwt_required()
@swag_from({
    'tags': ['Users'],
    'description': 'Get current user profile with garden stats',
    'security': [{'Bearer': []}],
    'responses': {
        '200': {'description': 'User profile'},
        '401': {'description': 'Unauthorized'},
        '404': {'description': 'User not found'}
    }
})
def get_current_user_profile():
    """Get the authenticated user's profile."""
    user_id = current_user_id()
    user = db.session.get(User, user_id)

    if not user:
        raise NotFoundError('User not found')

    profile = user.to_dict()
    profile['gardenStats'] = garden_stats(user_id)
    return jsonify({'user': profile})

@users_bp.route('/me/settings', methods=['GET'])
@jwt_required()
@swag_from({
    'tags': ['Users'],
    'description': 'Get fade settings, creating the defaults on first access',
    'security': [{'Bearer': []}],
    'responses': {
        '200': {
            'description': 'Fade settings',
            'schema': {
                'type': 'object',
                'properties': {'settings': {'$ref': '#/definitions/FadeSettings'}}
            }
        },
        '401': {'description': 'Unauthorized'}
    }
})
def get_fade_settings():
    """Get the authenticated user's fade settings."""
    settings = FadeSettingsStore().get_or_create_default(current_user_id())
    return jsonify({'settings': settings.to_dict()})

@users_bp.route('/me/settings', methods=['PUT'])
@jwt_required()
@swag_from({
    'tags': ['Users'],
    'description': 'Update fade settings; omitted rates keep their value',
    'security': [{'Bearer': []}],
    'parameters': [{
        'name': 'body',
        'in': 'body',
        'required': True,
        'schema': {'$ref': '#/definitions/FadeSettings'}
    }],
    'responses': {
        '200': {
            'description': 'Settings updated successfully',
            'schema': {
                'type': 'object',
                'properties': {
                    'message': {'type': 'string'},
                    'settings': {'$ref': '#/definitions/FadeSettings'}
                }
            }
        },
        '400': {'description': 'Invalid settings'},
        '401': {'description': 'Unauthorized'}
    }
})
def update_fade_settings():
    """Update the authenticated user's fade settings."""
    rates = parse_settings_payload(request.get_json(silent=True))
    settings = FadeSettingsStore().upsert(current_user_id(), rates)
    return jsonify({
        'message': 'Settings updated successfully',
        'settings': settings.to_dict()
    })

@users_bp.route('/me/stats', methods=['GET'])
@jwt_required()
@swag_from({
    'tags': ['Users'],
    'description': 'Get garden statistics',
    'security': [{'Bearer': []}],
    'responses': {
        '200': {'description': 'Stats'},
        '401': {'description': 'Unauthorized'}
    }
})
def get_stats():
    """Get the authenticated user's garden statistics."""
    return jsonify({'stats': garden_stats(current_user_id())})
