"""Initial schema for stock sheet import system

Revision ID: 001_initial_schema
Revises:
Create Date: 2025-11-03

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create stock_items table
    op.create_table(
        'stock_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('dataset', sa.String(length=255), nullable=False, comment='Dataset name e.g., stock_olav'),
        sa.Column('row_num', sa.Integer(), nullable=False, comment='1-based source row number'),
        sa.Column('code', sa.Text(), server_default='', nullable=False, comment='Item code (column A)'),
        sa.Column('description', sa.Text(), server_default='', nullable=False,
                  comment='Item description (column C)'),
        sa.Column('category', sa.Text(), server_default='', nullable=False,
                  comment='Item category (column F)'),
        sa.Column('stock', sa.Text(), server_default='', nullable=False,
                  comment='Stock quantity as written in the sheet (column H)'),
        sa.Column('uploaded_at', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'),
                  nullable=False, comment='Ingestion timestamp'),
        sa.Column('updated_at', sa.TIMESTAMP(), nullable=True, comment='Last edit timestamp'),
        sa.PrimaryKeyConstraint('id'),
        comment='Inventory rows, one dataset per warehouse'
    )

    op.create_index('idx_stock_items_dataset', 'stock_items', ['dataset'])
    op.create_index('idx_stock_items_dataset_code', 'stock_items', ['dataset', 'code'])

    # Create price_items table
    op.create_table(
        'price_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('dataset', sa.String(length=255), nullable=False, comment='Dataset name e.g., prices'),
        sa.Column('row_num', sa.Integer(), nullable=False, comment='1-based source row number of the code'),
        sa.Column('code', sa.Text(), server_default='', nullable=False, comment='Item code (column A)'),
        sa.Column('price', sa.Numeric(), nullable=True,
                  comment='Resolved price (NULL if the cell could not be read)'),
        sa.Column('price_text', sa.Text(), nullable=True,
                  comment='Raw text of an edited price that could not be normalized'),
        sa.Column('uploaded_at', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'),
                  nullable=False, comment='Ingestion timestamp'),
        sa.Column('updated_at', sa.TIMESTAMP(), nullable=True, comment='Last edit timestamp'),
        sa.PrimaryKeyConstraint('id'),
        comment='Price rows'
    )

    op.create_index('idx_price_items_dataset', 'price_items', ['dataset'])
    op.create_index('idx_price_items_dataset_code', 'price_items', ['dataset', 'code'])

    # Create import_runs table
    op.create_table(
        'import_runs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('warehouse', sa.String(length=255), nullable=False,
                  comment='Warehouse key given by the client'),
        sa.Column('dataset', sa.String(length=255), nullable=False, comment='Resolved dataset name'),
        sa.Column('kind', sa.String(length=20), nullable=False, comment='Dataset kind: inventory or price'),
        sa.Column('filename', sa.String(length=255), nullable=True, comment='Original upload filename'),
        sa.Column('status', sa.String(length=20), nullable=False, comment='Outcome of the upload'),
        sa.Column('parsed', sa.Integer(), server_default='0', nullable=False,
                  comment='Records extracted from the sheet'),
        sa.Column('inserted', sa.Integer(), server_default='0', nullable=False,
                  comment='Records written to the dataset'),
        sa.Column('error', postgresql.JSONB(astext_type=sa.Text()), nullable=True,
                  comment='Error details if the upload failed'),
        sa.Column('created_by', sa.String(length=255), nullable=True,
                  comment='User or API key that uploaded the file'),
        sa.Column('created_at', sa.TIMESTAMP(), server_default=sa.text('CURRENT_TIMESTAMP'),
                  nullable=False, comment='Upload timestamp'),
        sa.Column('completed_at', sa.TIMESTAMP(), nullable=True, comment='Completion timestamp'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint("status IN ('success', 'failed')", name='import_runs_status_check'),
        sa.CheckConstraint("kind IN ('inventory', 'price')", name='import_runs_kind_check'),
        comment='Upload history'
    )

    op.create_index('idx_import_runs_dataset', 'import_runs', ['dataset'])
    op.create_index('idx_import_runs_created_at', 'import_runs', ['created_at'])
    op.create_index('idx_import_runs_status', 'import_runs', ['status'])


def downgrade() -> None:
    # Drop import_runs table and indexes
    op.drop_index('idx_import_runs_status', table_name='import_runs')
    op.drop_index('idx_import_runs_created_at', table_name='import_runs')
    op.drop_index('idx_import_runs_dataset', table_name='import_runs')
    op.drop_table('import_runs')

    # Drop price_items table and indexes
    op.drop_index('idx_price_items_dataset_code', table_name='price_items')
    op.drop_index('idx_price_items_dataset', table_name='price_items')
    op.drop_table('price_items')

    # Drop stock_items table and indexes
    op.drop_index('idx_stock_items_dataset_code', table_name='stock_items')
    op.drop_index('idx_stock_items_dataset', table_name='stock_items')
    op.drop_table('stock_items')
