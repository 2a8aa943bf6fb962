from logging.config import fileConfig

from alembic import context

from academia.core.config import get_settings
from academia.db.base_class import Base
from academia.db.database import build_database_config
from academia.models import ai_artifact, assignment, course, enrollment, password_reset, submission, user  # noqa: F401
from sqlalchemy import create_engine

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

db_config = build_database_config(get_settings())


def run_migrations_offline():
    context.configure(url=db_config.url, target_metadata=Base.metadata, literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    connectable = create_engine(db_config.url, **db_config.engine_options)
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=Base.metadata,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
