from flask import Blueprint, request, jsonify
from roomshare.errors import ValidationError
from roomshare.services.review_service import get_review_service, ReviewService
from roomshare.utils.decorators import token_required, roles_required, admin_required

reviews_bp = Blueprint('reviews', __name__)

@reviews_bp.route('/', methods=['POST'])
@token_required
@roles_required('client')
def create_review(current_user):
    data = request.get_json(silent=True) or {}
    if 'booking_id' not in data:
        raise ValidationError("Field 'booking_id' is required.", field='booking_id')
    review = get_review_service().create_review(
        booking_id=data['booking_id'],
        client=current_user,
        rating=data.get('rating'),
        comment=data.get('comment')
    )
    return jsonify(review.to_dict()), 201

@reviews_bp.route('/', methods=['GET'])
@token_required
@admin_required
def list_reviews(current_user):
    return jsonify([r.to_dict() for r in ReviewService.list_all_reviews()])

@reviews_bp.route('/room/<int:room_id>', methods=['GET'])
def get_room_reviews(room_id):
    return jsonify([r.to_dict() for r in ReviewService.list_room_reviews(room_id)])

@reviews_bp.route('/owner', methods=['GET'])
@token_required
@roles_required('owner', 'admin')
def get_owner_reviews(current_user):
    return jsonify([r.to_dict() for r in ReviewService.list_owner_reviews(current_user.id)])

@reviews_bp.route('/<int:review_id>', methods=['PUT'])
@token_required
def update_review(current_user, review_id):
    data = request.get_json(silent=True) or {}
    review = get_review_service().update_review(
        review_id, current_user, rating=data.get('rating'), comment=data.get('comment')
    )
    return jsonify(review.to_dict()), 200

@reviews_bp.route('/<int:review_id>', methods=['DELETE'])
@token_required
def delete_review(current_user, review_id):
    get_review_service().delete_review(review_id, current_user)
    return jsonify({'message': 'Review deleted'}), 200
