"""
HTTP API routes.

- jim_routes: chaos monkey toggle and tuning
- message_routes: captured message browsing and deletion
- outgoing_routes: outgoing SMTP relay listing
"""
