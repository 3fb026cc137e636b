from datetime import datetime
from models.db import db

class Result(db.Model):
    __tablename__ = "results"

    id = db.Column(db.String(32), primary_key=True)
    user_id = db.Column(db.String(32), db.ForeignKey("users.id"), nullable=False, index=True)
    session_id = db.Column(db.String(32), db.ForeignKey("test_sessions.id"), nullable=False, index=True)

    listening_score = db.Column(db.Float, nullable=True)
    reading_score = db.Column(db.Float, nullable=True)
    writing_score = db.Column(db.Float, nullable=True)
    speaking_score = db.Column(db.Float, nullable=True)
    overall_score = db.Column(db.Float, nullable=True)

    published_by = db.Column(db.String(80), nullable=True)
    published_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    test_session = db.relationship("TestSession")

    def to_dict(self):
        s = self.test_session
        return {
            "id": self.id,
            "user_id": self.user_id,
            "session_id": self.session_id,
            "module_type": s.module_type if s else None,
            "test_date": s.test_date.isoformat() if s else None,
            "listening_score": self.listening_score,
            "reading_score": self.reading_score,
            "writing_score": self.writing_score,
            "speaking_score": self.speaking_score,
            "overall_score": self.overall_score,
            "published_by": self.published_by,
            "published_at": self.published_at.isoformat(),
        }
