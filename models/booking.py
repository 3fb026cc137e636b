from datetime import datetime
from models.db import db
from allocation.types import BookingRecord, SpeakingSlot

class Booking(db.Model):
    __tablename__ = "bookings"

    id = db.Column(db.String(32), primary_key=True)

    # student user id, or a synthesized GUEST-... id for walk-ins
    subject_id = db.Column(db.String(32), nullable=False, index=True)
    session_id = db.Column(db.String(32), db.ForeignKey("test_sessions.id"), nullable=False, index=True)

    module_type = db.Column(db.String(20), nullable=False)
    booking_date = db.Column(db.Date, nullable=False)
    status = db.Column(db.String(20), nullable=False, default="Confirmed")
    # status values: Pending, Confirmed, Cancelled, Completed

    is_guest = db.Column(db.Boolean, default=False, nullable=False)
    guest_name = db.Column(db.String(120), nullable=True)
    guest_phone = db.Column(db.String(30), nullable=True)

    # only for Speaking and Mock
    speaking_date = db.Column(db.Date, nullable=True)
    speaking_time = db.Column(db.String(20), nullable=True)
    speaking_room = db.Column(db.String(40), nullable=True)

    created_by = db.Column(db.String(80), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    test_session = db.relationship("TestSession")

    __table_args__ = (
        db.UniqueConstraint("session_id", "subject_id", name="uq_booking_subject_once"),
        # one candidate per room and time on a speaking day
        db.UniqueConstraint(
            "session_id", "speaking_date", "speaking_room", "speaking_time",
            name="uq_booking_speaking_slot",
        ),
    )

    @classmethod
    def from_record(cls, record: BookingRecord, created_by=None):
        slot = record.speaking
        return cls(
            id=record.id,
            subject_id=record.subject_id,
            session_id=record.session_id,
            module_type=record.module_type.value,
            booking_date=record.booking_date,
            status=record.status.value,
            is_guest=record.is_guest,
            speaking_date=slot.date if slot else None,
            speaking_time=slot.time if slot else None,
            speaking_room=slot.room if slot else None,
            created_by=created_by,
        )

    def to_record(self) -> BookingRecord:
        slot = None
        if self.speaking_date and self.speaking_room and self.speaking_time:
            slot = SpeakingSlot(date=self.speaking_date, room=self.speaking_room, time=self.speaking_time)
        return BookingRecord(
            id=self.id,
            subject_id=self.subject_id,
            session_id=self.session_id,
            module_type=self.module_type,
            booking_date=self.booking_date,
            status=self.status,
            speaking=slot,
            is_guest=bool(self.is_guest),
        )

    def to_dict(self, include_session=True):
        out = {
            "id": self.id,
            "subject_id": self.subject_id,
            "session_id": self.session_id,
            "module_type": self.module_type,
            "booking_date": self.booking_date.isoformat(),
            "status": self.status,
            "is_guest": self.is_guest,
            "guest_name": self.guest_name,
            "guest_phone": self.guest_phone,
            "speaking": None,
        }
        if self.speaking_date:
            out["speaking"] = {
                "date": self.speaking_date.isoformat(),
                "time": self.speaking_time,
                "room": self.speaking_room,
            }
        if include_session:
            s = self.test_session
            out["session"] = {
                "test_date": s.test_date.isoformat() if s else None,
                "test_time": s.test_time if s else None,
                "room_number": s.room_number if s else None,
                "is_deleted": s.is_deleted if s else None,
            }
        return out
