"""Create users, properties and messages tables

Revision ID: 3c1a9e7b52d4
Revises:
Create Date: 2025-09-02 10:14:52.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3c1a9e7b52d4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

FACILITY_COLUMNS = (
    'wifi', 'parking', 'ac', 'kitchen', 'laundry', 'security',
    'gym', 'pool', 'garden', 'balcony', 'furnished', 'pet_friendly',
)


def upgrade() -> None:
    op.create_table('users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )
    op.create_index('idx_users_email', 'users', ['email'], unique=False)

    op.create_table('properties',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('property_type', sa.String(length=20), nullable=False),
        sa.Column('rent', sa.Float(), nullable=False),
        sa.Column('rent_type', sa.String(length=20), nullable=False),
        sa.Column('city', sa.String(length=100), nullable=False),
        sa.Column('area', sa.String(length=100), nullable=False),
        sa.Column('pin_code', sa.String(length=6), nullable=False),
        sa.Column('address', sa.String(length=500), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        *[sa.Column(name, sa.Boolean(), nullable=False, server_default=sa.false()) for name in FACILITY_COLUMNS],
        sa.Column('bedrooms', sa.Integer(), nullable=False),
        sa.Column('bathrooms', sa.Integer(), nullable=False),
        sa.Column('floor_area', sa.Float(), nullable=False),
        sa.Column('floor', sa.Integer(), nullable=False),
        sa.Column('total_floors', sa.Integer(), nullable=False),
        sa.Column('images', sa.JSON(), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        sa.Column('show_on_map', sa.Boolean(), nullable=False),
        sa.Column('views', sa.Integer(), nullable=False),
        sa.Column('show_phone', sa.Boolean(), nullable=False),
        sa.Column('show_email', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )

    # Indexes for listing search and map view
    op.create_index('idx_properties_search', 'properties',
                    ['city', 'area', 'pin_code', 'property_type', 'rent', 'is_available'], unique=False)
    op.create_index('idx_properties_coordinates', 'properties', ['latitude', 'longitude'], unique=False)
    op.create_index('idx_properties_owner', 'properties', ['owner_id'], unique=False)
    op.create_index('idx_properties_created_at', 'properties', ['created_at'], unique=False)

    op.create_table('messages',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('sender_id', sa.Uuid(), nullable=False),
        sa.Column('receiver_id', sa.Uuid(), nullable=False),
        sa.Column('property_id', sa.Uuid(), nullable=False),
        sa.Column('subject', sa.String(length=100), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('message_type', sa.String(length=30), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_archived', sa.Boolean(), nullable=False),
        sa.Column('prefers_phone', sa.Boolean(), nullable=False),
        sa.Column('prefers_email', sa.Boolean(), nullable=False),
        sa.Column('prefers_whatsapp', sa.Boolean(), nullable=False),
        sa.Column('sender_name', sa.String(length=50), nullable=True),
        sa.Column('sender_phone', sa.String(length=20), nullable=True),
        sa.Column('sender_email', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ),
        sa.ForeignKeyConstraint(['receiver_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['sender_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_messages_conversation', 'messages', ['sender_id', 'receiver_id', 'created_at'], unique=False)
    op.create_index('idx_messages_unread', 'messages', ['receiver_id', 'is_read'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_messages_unread', table_name='messages')
    op.drop_index('idx_messages_conversation', table_name='messages')
    op.drop_table('messages')

    op.drop_index('idx_properties_created_at', table_name='properties')
    op.drop_index('idx_properties_owner', table_name='properties')
    op.drop_index('idx_properties_coordinates', table_name='properties')
    op.drop_index('idx_properties_search', table_name='properties')
    op.drop_table('properties')

    op.drop_index('idx_users_email', table_name='users')
    op.drop_table('users')
