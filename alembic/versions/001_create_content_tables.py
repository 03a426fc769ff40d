"""Create content tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSON


# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """Create tables for blogs, testimonials, contact submissions, newsletters and admin users."""

    # 1. Create blogs table
    op.create_table(
        'blogs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('excerpt', sa.String(length=1000), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('author', sa.String(length=100), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('tags', JSON, nullable=False),
        sa.Column('image', sa.String(length=500), nullable=True),
        sa.Column('thumbnail', sa.String(length=500), nullable=True),
        sa.Column('featured', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='draft'),
        sa.Column('publish_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reading_time', sa.String(length=50), nullable=True),
        sa.Column('seo_title', sa.String(length=255), nullable=True),
        sa.Column('seo_description', sa.String(length=1000), nullable=True),
        sa.Column('seo_keywords', sa.String(length=500), nullable=True),
        sa.Column('date', sa.String(length=50), nullable=True),
        sa.Column('views', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('likes', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_blogs_title', 'blogs', ['title'])
    op.create_index('ix_blogs_category', 'blogs', ['category'])
    op.create_index('ix_blogs_featured', 'blogs', ['featured'])
    op.create_index('ix_blogs_status', 'blogs', ['status'])
    op.create_index('ix_blogs_publish_date', 'blogs', ['publish_date'])
    op.create_index('ix_blogs_created_at', 'blogs', ['created_at'])

    # 2. Create testimonials table
    op.create_table(
        'testimonials',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('company', sa.String(length=150), nullable=False),
        sa.Column('position', sa.String(length=150), nullable=True),
        sa.Column('rating', sa.Integer(), nullable=False, server_default='5'),
        sa.Column('testimonial', sa.Text(), nullable=True),
        sa.Column('image', sa.String(length=500), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('featured', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('project_type', sa.String(length=100), nullable=True),
        sa.Column('source', sa.String(length=20), nullable=False, server_default='website'),
        sa.Column('verified', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_testimonials_rating_range'),
    )
    op.create_index('ix_testimonials_rating', 'testimonials', ['rating'])
    op.create_index('ix_testimonials_active', 'testimonials', ['active'])
    op.create_index('ix_testimonials_featured', 'testimonials', ['featured'])
    op.create_index('ix_testimonials_created_at', 'testimonials', ['created_at'])

    # 3. Create contact_submissions table
    op.create_table(
        'contact_submissions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('subject', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('read', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('replied', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('priority', sa.String(length=20), nullable=False, server_default='medium'),
        sa.Column('source', sa.String(length=50), nullable=False, server_default='website'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_contact_submissions_email', 'contact_submissions', ['email'])
    op.create_index('ix_contact_submissions_read', 'contact_submissions', ['read'])
    op.create_index('ix_contact_submissions_replied', 'contact_submissions', ['replied'])
    op.create_index('ix_contact_submissions_priority', 'contact_submissions', ['priority'])
    op.create_index('ix_contact_submissions_created_at', 'contact_submissions', ['created_at'])

    # 4. Create newsletter_subscribers table
    op.create_table(
        'newsletter_subscribers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=True),
        sa.Column('unsubscribed', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('unsubscribed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('source', sa.String(length=50), nullable=False, server_default='website'),
        sa.Column('preferences', JSON, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_newsletter_subscribers_email', 'newsletter_subscribers', ['email'], unique=True)
    op.create_index('ix_newsletter_subscribers_unsubscribed', 'newsletter_subscribers', ['unsubscribed'])
    op.create_index('ix_newsletter_subscribers_created_at', 'newsletter_subscribers', ['created_at'])

    # 5. Create newsletter_uploads table
    op.create_table(
        'newsletter_uploads',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=20), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('filename', sa.String(length=255), nullable=False),
        sa.Column('original_name', sa.String(length=255), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=True),
        sa.Column('download_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_newsletter_uploads_category', 'newsletter_uploads', ['category'])
    op.create_index('ix_newsletter_uploads_active', 'newsletter_uploads', ['active'])
    op.create_index('ix_newsletter_uploads_created_at', 'newsletter_uploads', ['created_at'])

    # 6. Create newsletter_campaigns table
    op.create_table(
        'newsletter_campaigns',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('subject', sa.String(length=255), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('sent_to', sa.String(length=20), nullable=False),
        sa.Column('subscriber_ids', JSON, nullable=True),
        sa.Column('recipient_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('sent_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('delivery_stats', JSON, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_newsletter_campaigns_status', 'newsletter_campaigns', ['status'])
    op.create_index('ix_newsletter_campaigns_created_at', 'newsletter_campaigns', ['created_at'])

    # 7. Create users table (stored admin accounts)
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='admin'),
        sa.Column('profile', JSON, nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('login_attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('locked_until', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)


def downgrade():
    """Drop content tables."""
    # Drop in reverse order of creation
    op.drop_index('ix_users_email', table_name='users')
    op.drop_index('ix_users_username', table_name='users')
    op.drop_table('users')

    op.drop_index('ix_newsletter_campaigns_created_at', table_name='newsletter_campaigns')
    op.drop_index('ix_newsletter_campaigns_status', table_name='newsletter_campaigns')
    op.drop_table('newsletter_campaigns')

    op.drop_index('ix_newsletter_uploads_created_at', table_name='newsletter_uploads')
    op.drop_index('ix_newsletter_uploads_active', table_name='newsletter_uploads')
    op.drop_index('ix_newsletter_uploads_category', table_name='newsletter_uploads')
    op.drop_table('newsletter_uploads')

    op.drop_index('ix_newsletter_subscribers_created_at', table_name='newsletter_subscribers')
    op.drop_index('ix_newsletter_subscribers_unsubscribed', table_name='newsletter_subscribers')
    op.drop_index('ix_newsletter_subscribers_email', table_name='newsletter_subscribers')
    op.drop_table('newsletter_subscribers')

    op.drop_index('ix_contact_submissions_created_at', table_name='contact_submissions')
    op.drop_index('ix_contact_submissions_priority', table_name='contact_submissions')
    op.drop_index('ix_contact_submissions_replied', table_name='contact_submissions')
    op.drop_index('ix_contact_submissions_read', table_name='contact_submissions')
    op.drop_index('ix_contact_submissions_email', table_name='contact_submissions')
    op.drop_table('contact_submissions')

    op.drop_index('ix_testimonials_created_at', table_name='testimonials')
    op.drop_index('ix_testimonials_featured', table_name='testimonials')
    op.drop_index('ix_testimonials_active', table_name='testimonials')
    op.drop_index('ix_testimonials_rating', table_name='testimonials')
    op.drop_table('testimonials')

    op.drop_index('ix_blogs_created_at', table_name='blogs')
    op.drop_index('ix_blogs_publish_date', table_name='blogs')
    op.drop_index('ix_blogs_status', table_name='blogs')
    op.drop_index('ix_blogs_featured', table_name='blogs')
    op.drop_index('ix_blogs_category', table_name='blogs')
    op.drop_index('ix_blogs_title', table_name='blogs')
    op.drop_table('blogs')
