from models import db
from models.user import Role, User
from security.password import hash_password

STAFF_ROLES = ["ADMIN", "SUPER_ADMIN"]

def seed_roles():
    existing = {r.name for r in Role.query.all()}
    for name in STAFF_ROLES:
        if name not in existing:
            db.session.add(Role(name=name))
    db.session.commit()

def create_staff_user(email: str, password: str, super_admin: bool = False, full_name=None) -> User:
    """Create or promote a staff account. Existing users keep their password."""
    seed_roles()
    email = email.strip().lower()
    wanted = {"ADMIN"} | ({"SUPER_ADMIN"} if super_admin else set())

    user = User.query.filter_by(email=email).first()
    if user is None:
        user = User(email=email, password_hash=hash_password(password), full_name=full_name)
        db.session.add(user)

    for role in Role.query.filter(Role.name.in_(wanted)).all():
        if role not in user.roles:
            user.roles.append(role)
    db.session.commit()
    return user
