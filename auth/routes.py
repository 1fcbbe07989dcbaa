from flask import request, jsonify, current_app
from flask_jwt_extended import jwt_required
from flasgger import swag_from
from .models import User
from app.extensions import db
from auth.utils import current_user_id, validate_email, validate_password
from . import auth_bp

@auth_bp.route('/register', methods=['POST'])
@swag_from({
    'tags': ['Authentication'],
    'description': 'Register a new user',
    'parameters': [{
        'name': 'body',
        'in': 'body',
        'required': True,
        'schema': {
            'type': 'object',
            'properties': {
                'username': {'type': 'string', 'example': 'johndoe'},
                'email': {'type': 'string', 'example': 'john@example.com'},
                'password': {'type': 'string', 'example': 'securepassword123'}
            },
            'required': ['username', 'email', 'password']
        }
    }],
    'responses': {
        '201': {
            'description': 'User registered successfully',
            'schema': {
                'type': 'object',
                'properties': {
                    'message': {'type': 'string'},
                    'user': {'type': 'object'},
                    'token': {'type': 'string'}
                }
            }
        },
        '400': {'description': 'Invalid input data'},
        '409': {'description': 'Username or email already exists'}
    }
})
def register():
    """Register a new user."""
    data = request.get_json(silent=True) or {}

    # Validate input
    if not all(k in data for k in ['username', 'email', 'password']):
        return jsonify({'error': 'Missing required fields'}), 400

    valid, message = validate_email(data['email'])
    if not valid:
        return jsonify({'error': message}), 400

    valid, message = validate_password(data['password'])
    if not valid:
        return jsonify({'error': message}), 400

    # Check if user already exists
    if User.query.filter_by(username=data['username']).first():
        return jsonify({'error': 'Username already exists'}), 409

    if User.query.filter_by(email=data['email']).first():
        return jsonify({'error': 'Email already registered'}), 409

    try:
        # Create new user
        user = User(
            username=data['username'],
            email=data['email'],
            password=data['password']
        )

        db.session.add(user)
        db.session.commit()

        # Generate JWT token
        token = user.generate_auth_token()

        return jsonify({
            'message': 'User registered successfully',
            'user': user.to_dict(),
            'token': token
        }), 201

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f'Registration error: {str(e)}')
        return jsonify({'error': 'Failed to register user'}), 500

@auth_bp.route('/login', methods=['POST'])
@swag_from({
    'tags': ['Authentication'],
    'description': 'Login with email and password',
    'parameters': [{
        'name': 'body',
        'in': 'body',
        'required': True,
        'schema': {
            'type': 'object',
            'properties': {
                'email': {'type': 'string', 'example': 'john@example.com'},
                'password': {'type': 'string', 'example': 'securepassword123'}
            },
            'required': ['email', 'password']
        }
    }],
    'responses': {
        '200': {'description': 'Login successful'},
        '400': {'description': 'Invalid input data'},
        '401': {'description': 'Invalid credentials'}
    }
})
def login():
    """Login user and return JWT token."""
    data = request.get_json(silent=True) or {}

    if not all(k in data for k in ['email', 'password']):
        return jsonify({'error': 'Missing email or password'}), 400

    user = User.query.filter_by(email=data['email']).first()

    if user and user.is_active and user.check_password(data['password']):
        token = user.generate_auth_token()
        return jsonify({
            'message': 'Login successful',
            'user': user.to_dict(),
            'token': token
        })

    return jsonify({'error': 'Invalid email or password'}), 401

@auth_bp.route('/password', methods=['POST'])
@jwt_required()
@swag_from({
    'tags': ['Authentication'],
    'description': 'Change the password of the logged-in user',
    'security': [{'Bearer': []}],
    'parameters': [{
        'name': 'body',
        'in': 'body',
        'required': True,
        'schema': {
            'type': 'object',
            'properties': {
                'currentPassword': {'type': 'string', 'example': 'securepassword123'},
                'newPassword': {'type': 'string', 'example': 'evenbetter456'}
            },
            'required': ['currentPassword', 'newPassword']
        }
    }],
    'responses': {
        '200': {'description': 'Password changed'},
        '400': {'description': 'Missing fields, wrong current password or weak new password'},
        '404': {'description': 'User not found'}
    }
})
def change_password():
    """Re-hash the user's password after checking the current one."""
    data = request.get_json(silent=True) or {}
    current_password = data.get('currentPassword')
    new_password = data.get('newPassword')

    if not all(isinstance(p, str) and p for p in (current_password, new_password)):
        return jsonify({'error': 'Current password and new password are required'}), 400

    user = db.session.get(User, current_user_id())
    if user is None:
        return jsonify({'error': 'User not found'}), 404

    if not user.check_password(current_password):
        return jsonify({'error': 'Current password is incorrect'}), 400

    valid, message = validate_password(new_password)
    if not valid:
        return jsonify({'error': message}), 400

    try:
        user.set_password(new_password)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f'Password change error: {str(e)}')
        return jsonify({'error': 'Failed to change password'}), 500

    return jsonify({'message': 'Password changed successfully'})
