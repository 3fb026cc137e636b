from .health import health_bp
from .auth import auth_bp
from .admin import admin_bp
from .sessions import sessions_bp
from .bookings import bookings_bp
from .students import students_bp
from .results import results_bp
