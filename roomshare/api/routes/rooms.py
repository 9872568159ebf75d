from flask import Blueprint, request, jsonify, current_app
from roomshare.models.base import isoformat_utc
from roomshare.services.booking_service import get_booking_service
from roomshare.services.room_service import RoomService
from roomshare.utils.decorators import token_required, optional_token, roles_required, admin_required
from roomshare.utils.timeutils import parse_instant

rooms_bp = Blueprint('rooms', __name__)

@rooms_bp.route('/', methods=['GET'])
@optional_token
def search_rooms(current_user):
    result = RoomService.search_rooms(
        actor=current_user,
        search=request.args.get('search'),
        min_capacity=request.args.get('capacity', type=int),
        min_rate=request.args.get('min_rate', type=float),
        max_rate=request.args.get('max_rate', type=float),
        page=request.args.get('page', 1, type=int),
        limit=request.args.get('limit', current_app.config['ROOMS_PAGE_SIZE'], type=int),
        sort=request.args.get('sort')
    )
    result['rooms'] = [r.to_dict() for r in result['rooms']]
    return jsonify(result)

@rooms_bp.route('/', methods=['POST'])
@token_required
@roles_required('owner', 'admin')
def create_room(current_user):
    room = RoomService.create_room(current_user, request.get_json(silent=True) or {})
    return jsonify({'message': 'Room created. It will be listed once an administrator approves it.',
                    'room': room.to_dict()}), 201

@rooms_bp.route('/mine', methods=['GET'])
@token_required
@roles_required('owner', 'admin')
def get_my_rooms(current_user):
    return jsonify([r.to_dict() for r in RoomService.list_owner_rooms(current_user.id)])

@rooms_bp.route('/pending', methods=['GET'])
@token_required
@admin_required
def get_pending_rooms(current_user):
    return jsonify([r.to_dict() for r in RoomService.list_pending_rooms()])

@rooms_bp.route('/<int:room_id>', methods=['GET'])
@optional_token
def get_room(current_user, room_id):
    return jsonify(RoomService.get_visible_room(room_id, current_user).to_dict())

@rooms_bp.route('/<int:room_id>', methods=['PUT'])
@token_required
@roles_required('owner', 'admin')
def update_room(current_user, room_id):
    room = RoomService.update_room(room_id, current_user, request.get_json(silent=True) or {})
    return jsonify({'message': 'Room updated', 'room': room.to_dict()}), 200

@rooms_bp.route('/<int:room_id>', methods=['DELETE'])
@token_required
@roles_required('owner', 'admin')
def delete_room(current_user, room_id):
    RoomService.delete_room(room_id, current_user)
    return jsonify({'message': 'Room deleted'}), 200

@rooms_bp.route('/<int:room_id>/approve', methods=['PUT'])
@token_required
@admin_required
def approve_room(current_user, room_id):
    return jsonify({'message': 'Room approved', 'room': RoomService.approve_room(room_id, current_user).to_dict()})

@rooms_bp.route('/<int:room_id>/reject', methods=['PUT'])
@token_required
@admin_required
def reject_room(current_user, room_id):
    return jsonify({'message': 'Room rejected', 'room': RoomService.reject_room(room_id, current_user).to_dict()})

@rooms_bp.route('/<int:room_id>/quote', methods=['GET'])
def quote(room_id):
    result = get_booking_service().compute_quote(
        room_id,
        parse_instant(request.args.get('start_time'), 'start_time'),
        parse_instant(request.args.get('end_time'), 'end_time')
    )
    return jsonify(result)

@rooms_bp.route('/<int:room_id>/conflicts', methods=['GET'])
def conflicts(room_id):
    service = get_booking_service()
    RoomService.get_room(room_id)
    found = service.find_conflicts(
        room_id,
        parse_instant(request.args.get('start_time'), 'start_time'),
        parse_instant(request.args.get('end_time'), 'end_time'),
        exclude_booking_id=request.args.get('exclude', type=int)
    )
    # Occupied slots only, not who booked them
    return jsonify([{'id': b.id, 'start_time': isoformat_utc(b.start_time),
                     'end_time': isoformat_utc(b.end_time), 'status': b.status} for b in found])
