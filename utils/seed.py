from models import db
from models.user import User, Role
from security.password import hash_password
from utils.ids import new_short_id
from utils.roles import ALL_ROLES, ADMIN

def seed_roles():
    existing = {r.name for r in Role.query.all()}
    for name in ALL_ROLES:
        if name not in existing:
            db.session.add(Role(name=name))
    db.session.commit()

def seed_initial_admin(username, password):
    """Create the first ADMIN account. Returns the user, or None if an ADMIN already exists."""
    admin_role = Role.query.filter_by(name=ADMIN).first()
    if admin_role is None:
        admin_role = Role(name=ADMIN)
        db.session.add(admin_role)
    elif admin_role.users:
        return None

    user = User(
        id=new_short_id(),
        username=username.strip(),
        password_hash=hash_password(password),
        created_by="System",
    )
    user.roles.append(admin_role)
    db.session.add(user)
    db.session.commit()
    return user
