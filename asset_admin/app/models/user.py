# app/models/user.py
from datetime import datetime
from enum import Enum
from flask import current_app
from flask_login import UserMixin
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired
from asset_admin.app import db, bcrypt

class RoleName(Enum):
    ADMIN = "Admin"
    STAFF = "Staff"

class Role(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), unique=True, nullable=False)

    def __repr__(self):
        return f"Role('{self.name}')"

class UserRole(db.Model):
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), primary_key=True)
    role_id = db.Column(db.Integer, db.ForeignKey('role.id'), primary_key=True)

    role = db.relationship('Role')

class User(db.Model, UserMixin):
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(100), unique=True, nullable=False)
    password_hash = db.Column(db.String(128), nullable=False)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    staff_code = db.Column(db.String(10), unique=True, nullable=False)
    date_of_birth = db.Column(db.Date)
    gender = db.Column(db.String(10))
    joined_date = db.Column(db.Date)
    location = db.Column(db.String(50), nullable=False)
    is_disabled = db.Column(db.Boolean, nullable=False, default=False)
    is_password_changed = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    last_updated = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user_roles = db.relationship('UserRole', backref='user', lazy='selectin', cascade='all, delete-orphan')

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    @property
    def role_names(self):
        return sorted(ur.role.name for ur in self.user_roles)

    @property
    def is_admin(self):
        return RoleName.ADMIN.value in self.role_names

    @property
    def is_active(self):
        return not self.is_disabled

    def set_roles(self, roles):
        self.user_roles = [UserRole(role=role) for role in roles]

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def get_auth_token(self):
        s = URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt='auth-token')
        return s.dumps({'user_id': self.id})

    @staticmethod
    def verify_auth_token(token):
        s = URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt='auth-token')
        try:
            user_id = s.loads(token, max_age=current_app.config['TOKEN_MAX_AGE'])['user_id']
        except (BadSignature, SignatureExpired, KeyError, TypeError):
            return None
        return db.session.get(User, user_id)

    def __repr__(self):
        return f"User('{self.username}', '{self.staff_code}')"
