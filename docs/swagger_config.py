"""Swagger documentation settings shared by the app factory."""

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": 'apispec',
            "route": '/apispec.json',
            "rule_filter": lambda rule: True,  # all in
            "model_filter": lambda tag: True,  # all in
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
    "uiversion": 3,
}

SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "Fading Diary API",
        "description": "API for a diary whose entries fade away and grow into a garden",
        "version": "1.0.0"
    },
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "JWT Authorization header using the Bearer scheme. Example: \"Authorization: Bearer {token}\""
        }
    },
    "security": [{"Bearer": []}],
    "schemes": ["http", "https"],
    "consumes": ["application/json"],
    "produces": ["application/json"],
    "tags": [
        {
            "name": "Authentication",
            "description": "User authentication and registration"
        },
        {
            "name": "Users",
            "description": "Profile, fade settings and stats"
        },
        {
            "name": "Entries",
            "description": "Diary entries and their fading lifecycle"
        },
        {
            "name": "Garden",
            "description": "Plants grown from fully faded entries"
        }
    ],
    "definitions": {
        'DiaryEntry': {
            'type': 'object',
            'properties': {
                'id': {'type': 'string'},
                'title': {'type': 'string'},
                'content': {'type': 'string'},
                'emotion': {'type': 'string', 'enum': ['ANGER', 'SADNESS', 'ANXIETY', 'JOY', 'LOVE', 'FEAR', 'HOPE', 'NEUTRAL']},
                'emotionScore': {'type': 'number', 'format': 'float'},
                'fadeStartDate': {'type': 'string', 'format': 'date-time'},
                'fadeRate': {'type': 'number', 'format': 'float'},
                'currentOpacity': {'type': 'number', 'format': 'float'},
                'viewCount': {'type': 'integer'},
                'lastViewedAt': {'type': 'string', 'format': 'date-time'},
                'isFullyFaded': {'type': 'boolean'},
                'transformedAt': {'type': 'string', 'format': 'date-time'},
                'createdAt': {'type': 'string', 'format': 'date-time'}
            }
        },
        'GardenPlant': {
            'type': 'object',
            'properties': {
                'id': {'type': 'string'},
                'diaryEntryId': {'type': 'string'},
                'plantType': {'type': 'string', 'enum': ['FLOWER', 'TREE', 'SUCCULENT', 'VINE', 'MOSS', 'CRYSTAL']},
                'color': {'type': 'string'},
                'growthStage': {'type': 'integer'},
                'size': {'type': 'number', 'format': 'float'},
                'beauty': {'type': 'number', 'format': 'float'},
                'positionX': {'type': 'number', 'format': 'float'},
                'positionY': {'type': 'number', 'format': 'float'}
            }
        },
        'FadeSettings': {
            'type': 'object',
            'properties': {
                'angerFadeRate': {'type': 'number', 'format': 'float'},
                'sadnessFadeRate': {'type': 'number', 'format': 'float'},
                'anxietyFadeRate': {'type': 'number', 'format': 'float'},
                'joyFadeRate': {'type': 'number', 'format': 'float'},
                'loveFadeRate': {'type': 'number', 'format': 'float'},
                'fearFadeRate': {'type': 'number', 'format': 'float'},
                'hopeFadeRate': {'type': 'number', 'format': 'float'},
                'neutralFadeRate': {'type': 'number', 'format': 'float'}
            }
        },
        'Error': {
            'type': 'object',
            'properties': {
                'error': {'type': 'string', 'description': 'Error message'}
            }
        }
    }
}
