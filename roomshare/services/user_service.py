import logging
from datetime import datetime, timedelta

import jwt
import pytz
from flask import current_app

from roomshare.errors import AuthenticationError, NotAuthorizedError, NotFoundError, ValidationError
from roomshare.extensions import db
from roomshare.models import Booking, Room, User

logger = logging.getLogger(__name__)

# Admin accounts are created by other admins (or seed.py), never by sign-up
SELF_SERVICE_ROLES = (User.CLIENT, User.OWNER)


class UserService:

    @staticmethod
    def register(username, email, password, role=User.CLIENT) -> User:
        if not username or not email or not password:
            raise ValidationError('Username, email and password are required.')
        if len(password) < 6:
            raise ValidationError('Password must be at least 6 characters.', field='password')
        if role not in SELF_SERVICE_ROLES:
            raise ValidationError(f"Role must be one of {list(SELF_SERVICE_ROLES)}.", field='role')
        if User.query.filter_by(username=username).first():
            raise ValidationError('Username already exists.', field='username')
        if User.query.filter_by(email=email.lower()).first():
            raise ValidationError('Email already exists.', field='email')

        user = User(username=username, email=email.lower(), role=role)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        logger.info("User %s registered as %s", user.id, role)
        return user

    @staticmethod
    def authenticate(username, password) -> User:
        user = User.query.filter_by(username=username).first()
        if not user or not user.check_password(password or ''):
            raise AuthenticationError()
        if not user.active:
            raise NotAuthorizedError('This account has been suspended.')
        return user

    @staticmethod
    def issue_token(user: User) -> str:
        hours = current_app.config.get('JWT_EXPIRATION_HOURS', 24)
        return jwt.encode({
            'user_id': user.id,
            'exp': datetime.now(pytz.utc) + timedelta(hours=hours)
        }, current_app.config['SECRET_KEY'], algorithm="HS256")

    @staticmethod
    def user_from_token(token) -> User:
        data = jwt.decode(token, current_app.config['SECRET_KEY'], algorithms=["HS256"])
        user = db.session.get(User, data['user_id'])
        if not user:
            raise AuthenticationError('User not found.')
        return user

    # --- PROFILE ---

    @staticmethod
    def update_details(user: User, username=None, email=None) -> User:
        """Change the user's own username and/or email. Role and status are not self-service."""
        if username is not None and username != user.username:
            if not username.strip():
                raise ValidationError('Username cannot be empty.', field='username')
            if User.query.filter(User.username == username, User.id != user.id).first():
                raise ValidationError('Username already exists.', field='username')
            user.username = username
        if email is not None and email.lower() != user.email:
            email = email.strip().lower()
            if '@' not in email:
                raise ValidationError('Invalid email address.', field='email')
            if User.query.filter(User.email == email, User.id != user.id).first():
                raise ValidationError('Email already exists.', field='email')
            user.email = email
        db.session.commit()
        logger.info("User %s updated their details", user.id)
        return user

    @staticmethod
    def update_password(user: User, current_password, new_password) -> str:
        """Returns a fresh token for the user."""
        if not user.check_password(current_password or ''):
            logger.warning("User %s gave a wrong current password", user.id)
            raise AuthenticationError('Current password is incorrect.')
        if not new_password or len(new_password) < 6:
            raise ValidationError('Password must be at least 6 characters.', field='new_password')
        user.set_password(new_password)
        db.session.commit()
        logger.info("User %s changed their password", user.id)
        return UserService.issue_token(user)

    # --- ADMINISTRATION ---

    @staticmethod
    def list_users():
        return User.query.order_by(User.created_at.desc()).all()

    @staticmethod
    def toggle_active(user_id, admin: User) -> User:
        """Ban or re-activate a user."""
        user = UserService._get_user(user_id)
        if user.id == admin.id:
            raise ValidationError('Cannot suspend yourself.')
        user.active = not user.active
        db.session.commit()
        logger.info("User %s %s by admin %s", user.id, 'activated' if user.active else 'banned', admin.id)
        return user

    @staticmethod
    def delete_user(user_id, admin: User):
        user = UserService._get_user(user_id)
        if user.id == admin.id:
            raise ValidationError('Cannot delete yourself.')
        # Bookings and listings are kept as records; suspend such accounts instead
        if Room.query.filter_by(owner_id=user.id).first() or Booking.query.filter_by(client_id=user.id).first():
            raise ValidationError('User still has rooms or bookings; suspend the account instead.')
        db.session.delete(user)
        db.session.commit()
        logger.info("User %s deleted by admin %s", user_id, admin.id)

    @staticmethod
    def _get_user(user_id) -> User:
        user = db.session.get(User, user_id)
        if not user:
            raise NotFoundError('User not found.')
        return user
