"""Initial database schema

Revision ID: 0001
Revises:
Create Date: 2025-10-19 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade database schema."""
    # Create contractor table
    op.create_table('contractor',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('company_name', sa.String(length=255), nullable=False),
        sa.Column('company_email', sa.String(length=320), nullable=True),
        sa.Column('phone', sa.String(length=64), nullable=False),
        sa.Column('code', sa.String(length=32), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('email_verified', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_contractor_email'), 'contractor', ['email'], unique=True)
    op.create_index(op.f('ix_contractor_code'), 'contractor', ['code'], unique=True)

    # Create landlord table
    op.create_table('landlord',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('contact_number', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_landlord_email'), 'landlord', ['email'], unique=True)
    op.create_index(op.f('ix_landlord_full_name'), 'landlord', ['full_name'], unique=False)

    # Create properties table
    op.create_table('properties',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('landlord_id', sa.Uuid(), nullable=True),
        sa.Column('property_name', sa.String(length=255), nullable=False),
        sa.Column('property_type', sa.String(length=100), nullable=True),
        sa.Column('full_address', sa.Text(), nullable=True),
        sa.Column('postcode', sa.String(length=16), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('price >= 0', name='ck_property_price_non_negative'),
        sa.ForeignKeyConstraint(['landlord_id'], ['landlord.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_properties_landlord_id'), 'properties', ['landlord_id'], unique=False)
    op.create_index(op.f('ix_properties_postcode'), 'properties', ['postcode'], unique=False)
    op.create_index(op.f('ix_properties_is_available'), 'properties', ['is_available'], unique=False)

    # Create booking_requests table
    op.create_table('booking_requests',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('company_name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('phone', sa.String(length=64), nullable=True),
        sa.Column('project_postcode', sa.String(length=16), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('team_size', sa.Integer(), nullable=True),
        sa.Column('budget_per_person_week', sa.String(length=64), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('team_size IS NULL OR team_size >= 0', name='ck_booking_request_team_size_non_negative'),
        sa.ForeignKeyConstraint(['user_id'], ['contractor.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_booking_requests_user_id'), 'booking_requests', ['user_id'], unique=False)

    # Create booking_dates table
    op.create_table('booking_dates',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('booking_request_id', sa.Uuid(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('start_date < end_date', name='ck_booking_date_start_before_end'),
        sa.ForeignKeyConstraint(['booking_request_id'], ['booking_requests.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_booking_dates_booking_request_id'), 'booking_dates', ['booking_request_id'], unique=False)
    op.create_index(op.f('ix_booking_dates_status'), 'booking_dates', ['status'], unique=False)

    # Create booked_properties table
    op.create_table('booked_properties',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('booking_date_id', sa.Uuid(), nullable=False),
        sa.Column('booking_request_id', sa.Uuid(), nullable=True),
        sa.Column('property_id', sa.Uuid(), nullable=False),
        sa.Column('contractor_id', sa.Uuid(), nullable=True),
        sa.Column('landlord_id', sa.Uuid(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('project_postcode', sa.String(length=16), nullable=True),
        sa.Column('team_size', sa.Integer(), nullable=True),
        sa.Column('contractor_name', sa.String(length=255), nullable=True),
        sa.Column('contractor_email', sa.String(length=320), nullable=True),
        sa.Column('contractor_phone', sa.String(length=64), nullable=True),
        sa.Column('property_name', sa.String(length=255), nullable=True),
        sa.Column('property_type', sa.String(length=100), nullable=True),
        sa.Column('property_address', sa.Text(), nullable=True),
        sa.Column('landlord_name', sa.String(length=255), nullable=True),
        sa.Column('landlord_contact', sa.String(length=320), nullable=True),
        sa.Column('value', sa.String(length=64), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('start_date <= end_date', name='ck_assignment_start_not_after_end'),
        sa.ForeignKeyConstraint(['booking_date_id'], ['booking_dates.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['booking_request_id'], ['booking_requests.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['contractor_id'], ['contractor.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['landlord_id'], ['landlord.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_booked_properties_booking_date_id'), 'booked_properties', ['booking_date_id'], unique=True)
    op.create_index(op.f('ix_booked_properties_booking_request_id'), 'booked_properties', ['booking_request_id'], unique=False)
    op.create_index(op.f('ix_booked_properties_property_id'), 'booked_properties', ['property_id'], unique=False)

    # Create bookings table
    op.create_table('bookings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('source', sa.String(length=20), nullable=False),
        sa.Column('property_id', sa.Uuid(), nullable=False),
        sa.Column('contractor_id', sa.Uuid(), nullable=True),
        sa.Column('assignment_id', sa.Uuid(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('start_date <= end_date', name='ck_booking_start_not_after_end'),
        sa.CheckConstraint(
            "(source = 'assignment') = (assignment_id IS NOT NULL)",
            name='ck_booking_assignment_matches_source'
        ),
        sa.ForeignKeyConstraint(['property_id'], ['properties.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['contractor_id'], ['contractor.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['assignment_id'], ['booked_properties.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('assignment_id')
    )
    op.create_index(op.f('ix_bookings_source'), 'bookings', ['source'], unique=False)
    op.create_index(op.f('ix_bookings_property_id'), 'bookings', ['property_id'], unique=False)
    op.create_index(op.f('ix_bookings_contractor_id'), 'bookings', ['contractor_id'], unique=False)
    op.create_index(op.f('ix_bookings_status'), 'bookings', ['status'], unique=False)

    # Create invoices table
    op.create_table('invoices',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('booking_id', sa.Uuid(), nullable=False),
        sa.Column('stripe_session_id', sa.String(length=255), nullable=False),
        sa.Column('stripe_payment_url', sa.Text(), nullable=True),
        sa.Column('amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('amount >= 0', name='ck_invoice_amount_non_negative'),
        sa.ForeignKeyConstraint(['booking_id'], ['bookings.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_invoices_booking_id'), 'invoices', ['booking_id'], unique=False)
    op.create_index(op.f('ix_invoices_stripe_session_id'), 'invoices', ['stripe_session_id'], unique=True)
    op.create_index(op.f('ix_invoices_status'), 'invoices', ['status'], unique=False)


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table('invoices')
    op.drop_table('bookings')
    op.drop_table('booked_properties')
    op.drop_table('booking_dates')
    op.drop_table('booking_requests')
    op.drop_table('properties')
    op.drop_table('landlord')
    op.drop_table('contractor')
