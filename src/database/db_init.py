import logging

from src import config
from .database import engine, SessionLocal, Base
from .models import User, Role, UserRole, DEFAULT_ROLES, SUPER_ADMIN
from src.services.auth_service import hash_password
from src.utils.logger import configure_logging

logger = logging.getLogger(__name__)

def initialize_db(bind=None, session_factory=None):
    """
    DB와 테이블을 생성하고, 기본 역할과 Super Admin 계정을 삽입합니다.
    이미 데이터가 있으면 빠진 역할만 채우고 넘어갑니다.
    """
    bind = bind or engine
    session_factory = session_factory or SessionLocal

    logger.info("Initializing database...")
    Base.metadata.create_all(bind=bind)

    db = session_factory()
    try:
        # Roles
        for role_id, name, description in DEFAULT_ROLES:
            if not db.query(Role).filter(Role.name == name).first():
                db.add(Role(id=role_id, name=name, description=description, is_active=True))
        db.flush()

        if db.query(User).first():
            db.commit()
            logger.info("Seed users already exist. Skipping admin creation.")
            return

        # Super Admin 사용자: flush로 ID를 먼저 받은 뒤 역할 할당 행을 추가합니다.
        admin_user = User(
            first_name="Super",
            last_name="Admin",
            email=config.ADMIN_EMAIL.lower(),
            password_hash=hash_password(config.ADMIN_PASSWORD),
            is_active=True,
        )
        db.add(admin_user)
        db.flush()

        admin_role = db.query(Role).filter(Role.name == SUPER_ADMIN).one()
        db.add(UserRole(user_id=admin_user.id, role_id=admin_role.id, is_active=True))

        db.commit()
        logger.info("Database initialized with default roles and admin user '%s'.", admin_user.email)

    except Exception:
        logger.exception("Database initialization failed.")
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == '__main__':
    configure_logging()
    initialize_db()
