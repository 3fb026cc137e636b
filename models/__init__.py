from .db import db
from .user import User, Role, user_roles
from .audit_log import AuditLog
from .login_session import LoginSession
from .student import Student
from .test_session import TestSession
from .booking import Booking
from .result import Result
