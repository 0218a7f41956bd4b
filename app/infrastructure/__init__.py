"""
Infrastructure layer for the storefront backend.

This layer contains the implementation details for external systems integration:
- Database (SQLAlchemy with PostgreSQL, Alembic migrations)
- Email services (Jinja2 templates, SMTP delivery)
"""
