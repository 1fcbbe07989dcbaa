from flask import request, jsonify, current_app
from flask_jwt_extended import jwt_required
from flasgger import swag_from
from sqlalchemy.exc import SQLAlchemyError
from app.extensions import db
from auth.utils import current_user_id
from journal.classifier import get_classifier
from journal.cleanup import run_cleanup
from journal.errors import NotFoundError, ValidationError
from journal.fade import DEFAULT_MODE, FadeRateResolver
from journal.lifecycle import EntryLifecycle
from journal.repository import EntryStore

# Create blueprint
from . import journal_bp

ENTRY_ID_PARAMETER = {
    'name': 'entry_id',
    'in': 'path',
    'type': 'string',
    'required': True,
    'description': 'ID of the diary entry'
}


def _owned_entry(entry_id, user_id):
    """Ownership is checked here, before the lifecycle touches the entry."""
    entry = EntryStore().find_for_user(entry_id, user_id)
    if entry is None:
        raise NotFoundError('Entry not found')
    return entry


@journal_bp.route('/entries', methods=['POST'])
@jwt_required()
@swag_from({
    'tags': ['Entries'],
    'description': 'Write a new diary entry; its emotion decides how fast it fades',
    'security': [{'Bearer': []}],
    'parameters': [{
        'name': 'body',
        'in': 'body',
        'required': True,
        'schema': {
            'type': 'object',
            'properties': {
                'title': {'type': 'string', 'example': 'Monday'},
                'content': {'type': 'string', 'example': 'Missed the bus and got soaked.'}
            },
            'required': ['content']
        }
    }],
    'responses': {
        '201': {
            'description': 'Entry created successfully',
            'schema': {
                'type': 'object',
                'properties': {
                    'message': {'type': 'string'},
                    'entry': {'$ref': '#/definitions/DiaryEntry'}
                }
            }
        },
        '400': {'description': 'Content is required'},
        '401': {'description': 'Unauthorized'}
    }
})
def create_entry():
    """Create a diary entry, classifying its emotion once."""
    data = request.get_json(silent=True) or {}
    content = data.get('content')
    title = data.get('title')

    if not isinstance(content, str) or not content.strip():
        raise ValidationError('Content is required')
    if title is not None and not isinstance(title, str):
        raise ValidationError('Title must be a string')

    analysis = get_classifier().classify(content)
    fade_rate = FadeRateResolver(DEFAULT_MODE).resolve(analysis.emotion, analysis.intensity)

    entry = EntryStore().create(
        user_id=current_user_id(),
        content=content,
        title=(title or '').strip() or None,
        emotion=analysis.emotion,
        emotion_score=analysis.intensity,
        fade_rate=fade_rate,
        current_opacity=1.0,
    )
    current_app.logger.info('Entry %s created as %s (fade rate %.2f)', entry.id, analysis.emotion.value, fade_rate)

    payload = entry.to_dict()
    payload['emotionAnalysis'] = analysis.to_dict()
    return jsonify({
        'message': 'Entry created successfully',
        'entry': payload
    }), 201


@journal_bp.route('/entries', methods=['GET'])
@jwt_required()
@swag_from({
    'tags': ['Entries'],
    'description': 'List the current user\'s entries, newest first, with fresh opacity',
    'security': [{'Bearer': []}],
    'parameters': [{
        'name': 'filter',
        'in': 'query',
        'type': 'string',
        'enum': ['all', 'fading', 'transformed'],
        'default': 'all'
    }],
    'responses': {
        '200': {
            'description': 'List of entries',
            'schema': {
                'type': 'object',
                'properties': {
                    'entries': {
                        'type': 'array',
                        'items': {'$ref': '#/definitions/DiaryEntry'}
                    }
                }
            }
        },
        '400': {'description': 'Unknown filter'},
        '401': {'description': 'Unauthorized'}
    }
})
def get_entries():
    """List entries, refreshing opacity and latching the ones that faded out."""
    entry_filter = request.args.get('filter', 'all')
    entries = EntryStore().list_for_user(current_user_id(), entry_filter)

    lifecycle = EntryLifecycle()
    refreshed = []
    for entry in entries:
        if not entry.is_fully_faded:
            entry = lifecycle.refresh(entry.id)
        refreshed.append(entry.to_dict())

    return jsonify({'entries': refreshed})


@journal_bp.route('/entries/<string:entry_id>', methods=['GET'])
@jwt_required()
@swag_from({
    'tags': ['Entries'],
    'description': 'Read an entry; every read makes it fade a little more',
    'security': [{'Bearer': []}],
    'parameters': [ENTRY_ID_PARAMETER],
    'responses': {
        '200': {
            'description': 'Entry details',
            'schema': {
                'type': 'object',
                'properties': {'entry': {'$ref': '#/definitions/DiaryEntry'}}
            }
        },
        '401': {'description': 'Unauthorized'},
        '404': {'description': 'Entry not found'}
    }
})
def view_entry(entry_id):
    """View an entry, counting the view against its opacity."""
    entry = _owned_entry(entry_id, current_user_id())
    entry = EntryLifecycle().view(entry.id)
    return jsonify({'entry': entry.to_dict()})


@journal_bp.route('/entries/<string:entry_id>/accelerate-fade', methods=['PUT'])
@jwt_required()
@swag_from({
    'tags': ['Entries'],
    'description': 'Let go of an entry faster; counts as five views',
    'security': [{'Bearer': []}],
    'parameters': [ENTRY_ID_PARAMETER],
    'responses': {
        '200': {
            'description': 'Fade accelerated',
            'schema': {
                'type': 'object',
                'properties': {
                    'message': {'type': 'string'},
                    'entry': {'$ref': '#/definitions/DiaryEntry'}
                }
            }
        },
        '401': {'description': 'Unauthorized'},
        '404': {'description': 'Entry not found'}
    }
})
def accelerate_fade(entry_id):
    """Accelerate the fade of an entry."""
    entry = _owned_entry(entry_id, current_user_id())
    entry = EntryLifecycle().accelerate_fade(entry.id)
    return jsonify({
        'message': 'Fade accelerated successfully',
        'entry': entry.to_dict()
    })


@journal_bp.route('/cleanup', methods=['POST'])
@jwt_required()
@swag_from({
    'tags': ['Entries'],
    'description': 'Recalculate every fading entry with current fade settings',
    'security': [{'Bearer': []}],
    'responses': {
        '200': {
            'description': 'Cleanup summary',
            'schema': {
                'type': 'object',
                'properties': {
                    'message': {'type': 'string'},
                    'fullyFadedEntries': {'type': 'integer'},
                    'recalculatedEntries': {'type': 'integer'},
                    'totalProcessed': {'type': 'integer'},
                    'failedEntries': {'type': 'integer'}
                }
            }
        },
        '401': {'description': 'Unauthorized'}
    }
})
def cleanup():
    """Run the batch recalculation."""
    try:
        report = run_cleanup()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'Cleanup error: {str(e)}')
        return jsonify({'error': 'Cleanup failed'}), 500
    return jsonify(report.to_dict())
