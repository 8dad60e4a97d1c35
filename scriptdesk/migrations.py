"""add script title

Upgrades a database created before scripts had titles. Runs inside the
storage engine's startup transaction through Alembic's operations API.
"""
import logging
from alembic.migration import MigrationContext
from alembic.operations import Operations
import sqlalchemy as sa

logger = logging.getLogger(__name__)

def add_script_title(connection):
    """Add a non-null ``title`` column (default '') to ``scripts``."""
    context = MigrationContext.configure(connection)
    op = Operations(context)
    op.add_column('scripts', sa.Column('title', sa.Text(), nullable=False, server_default=''))
    logger.info("Added title column to scripts table")
