"""Product catalog web application.

Server-rendered page shell with JSON page props for a single-page frontend,
backed by a SQLModel product store and session-scoped flash messages.
"""

__version__ = "0.1.0"
