from flask import Blueprint, request, jsonify, current_app
from roomshare.errors import ValidationError
from roomshare.models import Booking
from roomshare.services.booking_service import get_booking_service
from roomshare.utils.decorators import token_required, roles_required, admin_required
from roomshare.utils.timeutils import parse_instant

bookings_bp = Blueprint('bookings', __name__)

def _serialize(bookings):
    now = get_booking_service().now()
    if isinstance(bookings, Booking):
        return bookings.to_dict(now)
    return [b.to_dict(now) for b in bookings]

@bookings_bp.route('/', methods=['POST'])
@token_required
@roles_required('client')
def create_booking(current_user):
    data = request.get_json(silent=True) or {}
    if 'room_id' not in data:
        raise ValidationError("Field 'room_id' is required.", field='room_id')

    booking = get_booking_service().create_booking(
        room_id=data['room_id'],
        client=current_user,
        start_time=parse_instant(data.get('start_time'), 'start_time'),
        end_time=parse_instant(data.get('end_time'), 'end_time'),
        party_size=data.get('party_size', 1)
    )
    return jsonify(_serialize(booking)), 201

@bookings_bp.route('/', methods=['GET'])
@token_required
@admin_required
def list_bookings(current_user):
    return jsonify(_serialize(get_booking_service().list_all_bookings()))

@bookings_bp.route('/mine', methods=['GET'])
@token_required
def get_my_bookings(current_user):
    return jsonify(_serialize(get_booking_service().list_client_bookings(current_user.id)))

@bookings_bp.route('/owner', methods=['GET'])
@token_required
@roles_required('owner', 'admin')
def get_owner_bookings(current_user):
    return jsonify(_serialize(get_booking_service().list_owner_bookings(current_user.id)))

@bookings_bp.route('/<int:booking_id>', methods=['GET'])
@token_required
def get_booking(current_user, booking_id):
    return jsonify(_serialize(get_booking_service().get_booking(booking_id, current_user)))

@bookings_bp.route('/<int:booking_id>', methods=['PUT'])
@token_required
def update_booking(current_user, booking_id):
    data = request.get_json(silent=True) or {}
    booking = get_booking_service().reschedule_booking(
        booking_id=booking_id,
        actor=current_user,
        start_time=parse_instant(data.get('start_time'), 'start_time'),
        end_time=parse_instant(data.get('end_time'), 'end_time'),
        party_size=data.get('party_size')
    )
    return jsonify(_serialize(booking)), 200

@bookings_bp.route('/<int:booking_id>', methods=['DELETE'])
@token_required
@admin_required
def delete_booking(current_user, booking_id):
    get_booking_service().delete_booking(booking_id, current_user)
    return jsonify({'message': 'Booking deleted.'}), 200

@bookings_bp.route('/<int:booking_id>/cancel', methods=['PUT'])
@token_required
def cancel_booking(current_user, booking_id):
    booking = get_booking_service().cancel_booking(booking_id, current_user)
    return jsonify({'message': 'Booking cancelled successfully.', 'booking': _serialize(booking)}), 200

@bookings_bp.route('/<int:booking_id>/status', methods=['PUT'])
@token_required
def transition_booking(current_user, booking_id):
    data = request.get_json(silent=True) or {}
    target = data.get('status')
    if not target:
        raise ValidationError("Field 'status' is required.", field='status')
    booking = get_booking_service().transition_booking(booking_id, current_user, target)
    current_app.logger.info("Booking %s moved to %s via API", booking_id, target)
    return jsonify(_serialize(booking)), 200

@bookings_bp.route('/<int:booking_id>/review-eligibility', methods=['GET'])
@token_required
def review_eligibility(current_user, booking_id):
    service = get_booking_service()
    booking = service.get_booking(booking_id, current_user)
    return jsonify({'booking_id': booking.id, 'eligible': service.review_eligibility(booking, current_user)})
