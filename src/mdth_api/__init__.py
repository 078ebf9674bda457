"""MDTH platform accounts API: registration, login, profiles, and admin user management."""

__version__ = "0.1.0"
