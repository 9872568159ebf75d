from flask import Blueprint, request, jsonify
from roomshare.services.user_service import UserService
from roomshare.utils.decorators import token_required

auth_bp = Blueprint('auth', __name__)

@auth_bp.route('/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    user = UserService.register(
        username=data.get('username'),
        email=data.get('email'),
        password=data.get('password'),
        role=data.get('role', 'client')
    )
    return jsonify({'token': UserService.issue_token(user), 'user': user.to_dict()}), 201

@auth_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    user = UserService.authenticate(data.get('username'), data.get('password'))
    token = UserService.issue_token(user)
    return jsonify({'token': token, 'username': user.username, 'role': user.role})

@auth_bp.route('/me', methods=['GET'])
@token_required
def me(current_user):
    return jsonify(current_user.to_dict())

@auth_bp.route('/updatedetails', methods=['PUT'])
@token_required
def update_details(current_user):
    data = request.get_json(silent=True) or {}
    user = UserService.update_details(current_user, username=data.get('username'), email=data.get('email'))
    return jsonify({'message': 'Details updated', 'user': user.to_dict()}), 200

@auth_bp.route('/updatepassword', methods=['PUT'])
@token_required
def update_password(current_user):
    data = request.get_json(silent=True) or {}
    token = UserService.update_password(current_user, data.get('current_password'), data.get('new_password'))
    return jsonify({'message': 'Password updated', 'token': token}), 200
