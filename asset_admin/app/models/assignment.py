# app/models/assignment.py
from asset_admin.app import db
from datetime import datetime
from enum import Enum

class AssignmentState(Enum):
    WAITING_FOR_ACCEPTANCE = "WaitingForAcceptance"
    ACCEPTED = "Accepted"
    DECLINED = "Declined"
    WAITING_FOR_RETURNING = "WaitingForReturning"
    RETURNED = "Returned"

    @classmethod
    def active_values(cls):
        """States in which the assignment still holds its asset."""
        return [cls.WAITING_FOR_ACCEPTANCE.value, cls.ACCEPTED.value, cls.WAITING_FOR_RETURNING.value]

class Assignment(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    asset_id = db.Column(db.Integer, db.ForeignKey('asset.id'), nullable=False)
    assigned_by_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    assigned_to_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    note = db.Column(db.String(500))
    assigned_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    state = db.Column(db.String(30), nullable=False, default=AssignmentState.WAITING_FOR_ACCEPTANCE.value)
    last_updated = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    assigned_by = db.relationship('User', foreign_keys=[assigned_by_id])
    assigned_to = db.relationship('User', foreign_keys=[assigned_to_id], backref='assignments')
    returning_requests = db.relationship('ReturningRequest', backref='assignment', lazy=True)

    def __repr__(self):
        return f'<Assignment {self.id}: asset={self.asset_id} to={self.assigned_to_id} ({self.state})>'
