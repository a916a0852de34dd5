"""Auth Service: authentication, token lifecycle and role-based access control."""

__version__ = "1.0.0"
