"""create_annonces

Revision ID: 001_create_annonces
Revises:
Create Date: 2026-10-17 10:12:31.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_create_annonces'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'annonces',
        sa.Column('id', sa.String(128), nullable=False),
        sa.Column('member_id', sa.String(128), nullable=True),
        sa.Column('nom_annonce', sa.Text(), nullable=True),
        sa.Column('statut_publication', sa.String(8), nullable=False, server_default='Non'),
        sa.Column('fonction', sa.Text(), nullable=True),
        sa.Column('esg', sa.String(8), nullable=True),
        sa.Column('type_rdv', sa.Text(), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('data', sa.JSON(), nullable=False),
        sa.Column('photo_url', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('latitude >= -90 AND latitude <= 90', name='ck_annonces_latitude'),
        sa.CheckConstraint('longitude >= -180 AND longitude <= 180', name='ck_annonces_longitude'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_annonces_member_id', 'annonces', ['member_id'])
    op.create_index('ix_annonces_statut_publication', 'annonces', ['statut_publication'])
    op.create_index('ix_annonces_updated_at', 'annonces', ['updated_at'])
    # bounding-box pre-filter
    op.create_index('ix_annonces_lat_lng', 'annonces', ['latitude', 'longitude'])

    op.create_table(
        'annonce_domaines',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('annonce_id', sa.String(128), nullable=False),
        sa.Column('domaine', sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(['annonce_id'], ['annonces.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_annonce_domaines_domaine', 'annonce_domaines', ['domaine'])
    op.create_index('ix_annonce_domaines_annonce_id', 'annonce_domaines', ['annonce_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_annonce_domaines_annonce_id', table_name='annonce_domaines')
    op.drop_index('ix_annonce_domaines_domaine', table_name='annonce_domaines')
    op.drop_table('annonce_domaines')
    op.drop_index('ix_annonces_lat_lng', table_name='annonces')
    op.drop_index('ix_annonces_updated_at', table_name='annonces')
    op.drop_index('ix_annonces_statut_publication', table_name='annonces')
    op.drop_index('ix_annonces_member_id', table_name='annonces')
    op.drop_table('annonces')
