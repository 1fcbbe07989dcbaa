from flask import jsonify, current_app
from flask_jwt_extended import jwt_required
from flasgger import swag_from
from auth.utils import current_user_id
from garden.repository import GardenPlantStore
from garden.transformer import ensure_garden

# Create blueprint
from . import garden_bp


@garden_bp.route('', methods=['GET'])
@jwt_required()
@swag_from({
    'tags': ['Garden'],
    'description': 'Get the current user\'s garden, planting any newly faded entries first',
    'security': [{'Bearer': []}],
    'responses': {
        '200': {
            'description': 'Plants in the garden',
            'schema': {
                'type': 'object',
                'properties': {
                    'plants': {
                        'type': 'array',
                        'items': {'$ref': '#/definitions/GardenPlant'}
                    }
                }
            }
        },
        '401': {'description': 'Unauthorized'}
    }
})
def get_garden():
    """Materialise missing plants and return the whole garden."""
    user_id = current_user_id()
    planted = ensure_garden(user_id)
    if planted:
        current_app.logger.info('Planted %d new plants for user %s', len(planted), user_id)

    plants = GardenPlantStore().list_for_user(user_id)
    return jsonify({'plants': [plant.to_dict() for plant in plants]})
