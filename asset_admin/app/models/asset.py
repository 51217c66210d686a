# app/models/asset.py
from datetime import datetime
from asset_admin.app import db
from enum import Enum

class AssetState(Enum):
    AVAILABLE = "Available"
    NOT_AVAILABLE = "NotAvailable"
    WAITING_FOR_RECYCLING = "WaitingForRecycling"
    RECYCLED = "Recycled"

    @classmethod
    def parse(cls, value):
        """Match an enum member or a case-insensitive value string."""
        if isinstance(value, cls):
            return value
        try:
            return next(s for s in cls if s.value.lower() == str(value).strip().lower())
        except StopIteration:
            raise ValueError(f"Invalid asset state: {value}")

class Asset(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    asset_code = db.Column(db.String(20), unique=True, nullable=False)
    category_id = db.Column(db.Integer, db.ForeignKey('category.id'), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    specification = db.Column(db.Text)
    installed_date = db.Column(db.Date)
    state = db.Column(db.String(30), nullable=False, default=AssetState.AVAILABLE.value)
    location = db.Column(db.String(50), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    last_updated = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    assignments = db.relationship('Assignment', backref='asset', lazy=True,
                                  order_by='Assignment.assigned_date.desc()')

    def __init__(self, asset_code, category_id, name, location, state=None, **kwargs):
        super().__init__(**kwargs)
        # Standardize asset code (e.g., uppercase, remove extra spaces)
        self.asset_code = str(asset_code).strip().upper()
        self.category_id = category_id
        self.name = name.strip()
        self.location = location
        self.state = AssetState.parse(state).value if state else AssetState.AVAILABLE.value

    @property
    def active_assignment(self):
        """The assignment still holding this asset, if any."""
        from .assignment import AssignmentState
        return next((a for a in self.assignments if a.state in AssignmentState.active_values()), None)

    def __repr__(self):
        return f'<Asset {self.asset_code}: {self.name} ({self.state})>'
