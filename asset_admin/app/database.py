from datetime import date

from flask import current_app

from asset_admin.app import db
from asset_admin.app.logger import get_logger
from asset_admin.app.models import Role, RoleName, User

logger = get_logger("asset_admin.database")


def seed_roles():
    # Safe to run on every start: only missing roles are inserted
    existing = {name for (name,) in db.session.query(Role.name).all()}
    missing = [role.value for role in RoleName if role.value not in existing]
    for name in missing:
        db.session.add(Role(name=name))
    if missing:
        db.session.commit()
        logger.info("Seeded roles: %s", ', '.join(missing))


def seed_admin():
    password = current_app.config.get('ADMIN_PASSWORD')
    if not password:
        return
    username = current_app.config['ADMIN_USERNAME']
    if User.query.filter_by(username=username).first() is not None:
        return

    admin = User(
        username=username,
        first_name='System',
        last_name='Administrator',
        staff_code='SD0000',
        joined_date=date.today(),
        location=current_app.config['ADMIN_LOCATION'],
        is_password_changed=True,
    )
    admin.set_password(password)
    admin.set_roles([Role.query.filter_by(name=RoleName.ADMIN.value).one()])
    db.session.add(admin)
    db.session.commit()
    logger.info("Seeded admin account %s", username)


def seed_db():
    seed_roles()
    seed_admin()
