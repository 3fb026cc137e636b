STUDENT = "STUDENT"
VIEWER = "VIEWER"
MODERATOR = "MODERATOR"
CO_ADMIN = "CO_ADMIN"
ADMIN = "ADMIN"

ALL_ROLES = [STUDENT, VIEWER, MODERATOR, CO_ADMIN, ADMIN]
STAFF_ROLES = [VIEWER, MODERATOR, CO_ADMIN, ADMIN]

# who may change what; ADMIN is implied everywhere by require_roles
SCHEDULE_MANAGERS = (CO_ADMIN,)
RECORD_EDITORS = (CO_ADMIN, MODERATOR)


def is_staff(user) -> bool:
    return user is not None and bool(user.role_names.intersection(STAFF_ROLES))


def primary_role(user):
    """Highest-privilege role name of a user, or None."""
    names = user.role_names if user is not None else set()
    for name in reversed(ALL_ROLES):
        if name in names:
            return name
    return None
