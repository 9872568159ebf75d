from flask import Blueprint, jsonify
from roomshare.services.room_service import RoomService
from roomshare.services.user_service import UserService
from roomshare.utils.decorators import token_required, admin_required

admin_bp = Blueprint('admin', __name__)

# --- USERS MANAGEMENT ---

@admin_bp.route('/users', methods=['GET'])
@token_required
@admin_required
def get_users(current_user):
    return jsonify([u.to_dict() for u in UserService.list_users()]), 200

@admin_bp.route('/users/<int:user_id>/toggle', methods=['PUT'])
@token_required
@admin_required
def toggle_user(current_user, user_id):
    user = UserService.toggle_active(user_id, current_user)
    state = 'activated' if user.active else 'banned'
    return jsonify({'message': f'User {state}', 'user': user.to_dict()}), 200

@admin_bp.route('/users/<int:user_id>', methods=['DELETE'])
@token_required
@admin_required
def delete_user(current_user, user_id):
    UserService.delete_user(user_id, current_user)
    return jsonify({'message': 'User deleted'}), 200

# --- ROOMS MANAGEMENT ---

@admin_bp.route('/rooms', methods=['GET'])
@token_required
@admin_required
def get_rooms(current_user):
    return jsonify([r.to_dict() for r in RoomService.list_all_rooms()]), 200
