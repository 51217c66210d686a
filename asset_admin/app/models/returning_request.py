# app/models/returning_request.py
from asset_admin.app import db
from datetime import datetime
from enum import Enum

class ReturningRequestState(Enum):
    WAITING_FOR_RETURNING = "WaitingForReturning"
    COMPLETED = "Completed"

class ReturningRequest(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    assignment_id = db.Column(db.Integer, db.ForeignKey('assignment.id'), nullable=False)
    requested_by_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    accepted_by_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)
    returned_date = db.Column(db.Date)
    state = db.Column(db.String(30), nullable=False, default=ReturningRequestState.WAITING_FOR_RETURNING.value)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    last_updated = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    requested_by = db.relationship('User', foreign_keys=[requested_by_id])
    accepted_by = db.relationship('User', foreign_keys=[accepted_by_id])

    def __repr__(self):
        return f"ReturningRequest('{self.assignment_id}', '{self.state}')"
