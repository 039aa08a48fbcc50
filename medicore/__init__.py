"""MediCore: clinical encounter authoring and role-based access for the hospital front end."""

__version__ = "0.3.0"
