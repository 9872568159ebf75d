import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from roomshare.config import DevelopmentConfig
from roomshare.errors import RoomshareError
from roomshare.extensions import db, migrate

def create_app(config_class=DevelopmentConfig, clock=None):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(format='%(asctime)s %(levelname)s [%(name)s] %(message)s')
    logging.getLogger('roomshare').setLevel(app.config['LOG_LEVEL'])
    app.logger.setLevel(app.config['LOG_LEVEL'])

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    from roomshare import models  # noqa: F401  registers the tables
    from roomshare.services.booking_service import BookingService
    from roomshare.services.review_service import ReviewService

    booking_service = BookingService(clock=clock, initial_status=app.config['BOOKING_INITIAL_STATUS'])
    app.extensions['booking_service'] = booking_service
    app.extensions['review_service'] = ReviewService(booking_service)

    # Register Blueprints
    from roomshare.api.routes.auth import auth_bp
    from roomshare.api.routes.rooms import rooms_bp
    from roomshare.api.routes.bookings import bookings_bp
    from roomshare.api.routes.reviews import reviews_bp
    from roomshare.api.routes.admin import admin_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(rooms_bp, url_prefix='/api/rooms')
    app.register_blueprint(bookings_bp, url_prefix='/api/bookings')
    app.register_blueprint(reviews_bp, url_prefix='/api/reviews')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')

    register_error_handlers(app)

    from roomshare.cli import register_commands
    register_commands(app)

    @app.route('/health')
    def health():
        return {"status": "ok", "app": "roomshare"}

    return app

def register_error_handlers(app):

    @app.errorhandler(RoomshareError)
    def handle_domain_error(error):
        db.session.rollback()
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'error': error.description}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        app.logger.exception("Unhandled error: %s", error)
        return jsonify({'error': 'Server Error'}), 500
