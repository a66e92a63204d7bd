from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool
from alembic import context
from mcp_factory.core.config import settings
from mcp_factory.db.session import Base
from mcp_factory.db import models  # noqa

config = context.config
# alembic.ini may omit logging sections; application logging is configured separately
if config.config_file_name:
    try:
        fileConfig(config.config_file_name)
    except (KeyError, ValueError):
        pass
target_metadata = Base.metadata
database_url = config.get_main_option("sqlalchemy.url") or settings.database_url

def run_migrations_offline():
    context.configure(url=database_url, target_metadata=target_metadata, literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()

def run_migrations_online():
    configuration = {"sqlalchemy.url": database_url}
    connectable = engine_from_config(configuration, prefix="sqlalchemy.", poolclass=pool.NullPool)
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()

if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
