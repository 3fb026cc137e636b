from datetime import datetime
from models.db import db
from allocation.types import SessionRecord

class TestSession(db.Model):
    """A scheduled test event candidates book seats in."""
    __tablename__ = "test_sessions"

    id = db.Column(db.String(32), primary_key=True)

    module_type = db.Column(db.String(20), nullable=False, index=True)
    # module values: Listening, Reading, Writing, Speaking, Mock
    test_date = db.Column(db.Date, nullable=False, index=True)
    test_day = db.Column(db.String(12), nullable=True)  # weekday label, e.g. Saturday
    test_time = db.Column(db.String(20), nullable=False)
    room_number = db.Column(db.String(40), nullable=False)

    max_capacity = db.Column(db.Integer, nullable=False)
    current_registrations = db.Column(db.Integer, nullable=False, default=0)

    is_closed = db.Column(db.Boolean, default=False, nullable=False)
    # rows are never removed so bookings and results keep their date/room/time
    is_deleted = db.Column(db.Boolean, default=False, nullable=False)

    created_by = db.Column(db.String(80), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.CheckConstraint("max_capacity > 0", name="ck_test_sessions_capacity_positive"),
        db.CheckConstraint(
            "current_registrations >= 0 AND current_registrations <= max_capacity",
            name="ck_test_sessions_registrations_in_range",
        ),
    )

    def to_record(self) -> SessionRecord:
        return SessionRecord(
            id=self.id,
            module_type=self.module_type,
            test_date=self.test_date,
            test_time=self.test_time,
            room=self.room_number,
            max_capacity=self.max_capacity,
            current_registrations=self.current_registrations or 0,
            is_closed=bool(self.is_closed),
            is_deleted=bool(self.is_deleted),
        )

    def apply_record(self, record: SessionRecord) -> None:
        """Copy schedule fields and flags back from a record; the counter is left to the store."""
        self.test_date = record.test_date
        self.test_day = record.test_date.strftime("%A")
        self.test_time = record.test_time
        self.room_number = record.room
        self.max_capacity = record.max_capacity
        self.is_closed = record.is_closed
        self.is_deleted = record.is_deleted

    def to_dict(self):
        record = self.to_record()
        return {
            "id": self.id,
            "module_type": self.module_type,
            "test_date": self.test_date.isoformat(),
            "test_day": self.test_day,
            "test_time": self.test_time,
            "room_number": self.room_number,
            "max_capacity": self.max_capacity,
            "current_registrations": self.current_registrations,
            "is_full": record.is_full,
            "seats_left": record.seats_left,
            "is_closed": self.is_closed,
            "is_deleted": self.is_deleted,
        }
