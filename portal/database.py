from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from portal.core import config


connect_args = {"check_same_thread": False} if config.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(config.DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_portal_schema_checked = False

# Columns added after the first deployment of each table.
COLUMN_UPGRADES = {
    'users': [
        ('hashed_password', 'ALTER TABLE users ADD COLUMN hashed_password VARCHAR'),
        ('sso_subject', 'ALTER TABLE users ADD COLUMN sso_subject VARCHAR'),
    ],
    'alumni_profile': [
        ('cgpa', 'ALTER TABLE alumni_profile ADD COLUMN cgpa VARCHAR'),
        ('expertise_areas', 'ALTER TABLE alumni_profile ADD COLUMN expertise_areas JSON'),
        ('bio', 'ALTER TABLE alumni_profile ADD COLUMN bio TEXT'),
    ],
    'inquiries': [
        ('updated_at', 'ALTER TABLE inquiries ADD COLUMN updated_at TIMESTAMP'),
    ],
}

INDEXES = [
    'CREATE INDEX IF NOT EXISTS idx_users_role_created ON users(role, created_at)',
    'CREATE INDEX IF NOT EXISTS idx_alumni_profile_verified_created ON alumni_profile(is_verified, created_at)',
    'CREATE INDEX IF NOT EXISTS idx_inquiries_status_created ON inquiries(status, created_at)',
]


def ensure_portal_schema(bind=None) -> None:
    global _portal_schema_checked

    if _portal_schema_checked and bind is None:
        return

    with _schema_lock:
        if _portal_schema_checked and bind is None:
            return

        target = bind or engine
        inspector = inspect(target)
        table_names = set(inspector.get_table_names())

        with target.begin() as connection:
            for table_name, migration_steps in COLUMN_UPGRADES.items():
                if table_name not in table_names:
                    continue
                existing_columns = {column['name'] for column in inspector.get_columns(table_name)}
                for column_name, statement in migration_steps:
                    if column_name not in existing_columns:
                        connection.execute(text(statement))
            if {'users', 'alumni_profile', 'inquiries'} <= table_names:
                for statement in INDEXES:
                    connection.execute(text(statement))

        if bind is None:
            _portal_schema_checked = True
