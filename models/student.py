from datetime import datetime
from models.db import db
from allocation.types import Balance, ModuleType, StudentSubject

class Student(db.Model):
    __tablename__ = "students"

    user_id = db.Column(db.String(32), db.ForeignKey("users.id"), primary_key=True)

    gender = db.Column(db.String(10), nullable=True)  # Male, Female, Others
    batch_number = db.Column(db.String(40), nullable=True)
    expiry_date = db.Column(db.Date, nullable=True)  # account validity

    # remaining tests per module
    remaining_listening = db.Column(db.Integer, nullable=False, default=0)
    remaining_reading = db.Column(db.Integer, nullable=False, default=0)
    remaining_writing = db.Column(db.Integer, nullable=False, default=0)
    remaining_speaking = db.Column(db.Integer, nullable=False, default=0)
    remaining_mock = db.Column(db.Integer, nullable=False, default=0)

    created_by = db.Column(db.String(80), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    user = db.relationship("User", back_populates="student")

    __table_args__ = (
        db.CheckConstraint("remaining_listening >= 0", name="ck_students_listening_nonneg"),
        db.CheckConstraint("remaining_reading >= 0", name="ck_students_reading_nonneg"),
        db.CheckConstraint("remaining_writing >= 0", name="ck_students_writing_nonneg"),
        db.CheckConstraint("remaining_speaking >= 0", name="ck_students_speaking_nonneg"),
        db.CheckConstraint("remaining_mock >= 0", name="ck_students_mock_nonneg"),
    )

    @staticmethod
    def balance_column(module_type):
        return getattr(Student, "remaining_" + ModuleType(module_type).balance_key)

    def balance(self) -> Balance:
        return Balance(**{
            m.balance_key: getattr(self, "remaining_" + m.balance_key) or 0
            for m in ModuleType
        })

    def set_balance(self, balance: Balance) -> None:
        for key, value in balance.as_dict().items():
            setattr(self, "remaining_" + key, value)

    def to_subject(self) -> StudentSubject:
        return StudentSubject(student_id=self.user_id, balance=self.balance(), expiry_date=self.expiry_date)
