"""Create resume_documents table

Revision ID: create_resume_documents
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'create_resume_documents'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'resume_documents',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('resume_id', sa.String(length=64), nullable=False),
        sa.Column('original_file_name', sa.String(length=255), nullable=False),
        sa.Column('candidate_name', sa.String(length=255), nullable=True),
        sa.Column('overall_score', sa.Float(), nullable=False),
        sa.Column('roast_level', sa.String(length=50), nullable=True),
        sa.Column('client_ip', sa.String(length=64), nullable=True),
        sa.Column('uploaded_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('document', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_resume_documents_id'), 'resume_documents', ['id'], unique=False)
    op.create_index(op.f('ix_resume_documents_resume_id'), 'resume_documents', ['resume_id'], unique=True)
    op.create_index(op.f('ix_resume_documents_overall_score'), 'resume_documents', ['overall_score'], unique=False)
    op.create_index(op.f('ix_resume_documents_roast_level'), 'resume_documents', ['roast_level'], unique=False)
    op.create_index(op.f('ix_resume_documents_client_ip'), 'resume_documents', ['client_ip'], unique=False)
    op.create_index(op.f('ix_resume_documents_uploaded_at'), 'resume_documents', ['uploaded_at'], unique=False)


def downgrade():
    op.drop_index(op.f('ix_resume_documents_uploaded_at'), table_name='resume_documents')
    op.drop_index(op.f('ix_resume_documents_client_ip'), table_name='resume_documents')
    op.drop_index(op.f('ix_resume_documents_roast_level'), table_name='resume_documents')
    op.drop_index(op.f('ix_resume_documents_overall_score'), table_name='resume_documents')
    op.drop_index(op.f('ix_resume_documents_resume_id'), table_name='resume_documents')
    op.drop_index(op.f('ix_resume_documents_id'), table_name='resume_documents')
    op.drop_table('resume_documents')
