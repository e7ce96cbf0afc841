"""
MailHog server

Web and API based SMTP testing tool:
- Pluggable message storage (memory, maildir, MongoDB)
- Jim, a chaos monkey whose state persists across restarts
- Outgoing SMTP relay table
- Browser UI served alongside the HTTP API
"""

__version__ = "2.0.3"

from mailhog_server.config import Settings

__all__ = ["__version__", "Settings"]
