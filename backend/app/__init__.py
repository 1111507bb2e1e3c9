"""Expense tracker backend: FastAPI app, persistence and migrations.

The web application lives in :mod:`backend.app.main`; it is not imported here
so Alembic can load the models without building the app.
"""
