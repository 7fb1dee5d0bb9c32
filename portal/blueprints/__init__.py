"""
Portal blueprints: public, auth, dashboard, reports, users

Each subpackage's __init__.py only creates its blueprint object; routes.py
imports it and is itself imported by ``create_app``, which keeps the
factory free of circular imports.
"""
