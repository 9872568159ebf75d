from roomshare.extensions import db
from roomshare.models.base import utcnow
from werkzeug.security import generate_password_hash, check_password_hash

class User(db.Model):
    __tablename__ = 'users'

    CLIENT = 'client'
    OWNER = 'owner'
    ADMIN = 'admin'
    ROLES = (CLIENT, OWNER, ADMIN)

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(256))
    role = db.Column(db.String(20), nullable=False, default=CLIENT)
    active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, default=utcnow)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    @property
    def is_admin(self):
        return self.role == self.ADMIN

    @property
    def is_client(self):
        return self.role == self.CLIENT

    def owns(self, room):
        return room is not None and room.owner_id == self.id

    def can_manage(self, room):
        """Owner of the room, or an admin."""
        return self.is_admin or self.owns(room)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'role': self.role,
            'active': self.active,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }
