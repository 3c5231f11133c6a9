# Routes package init
"""
FamilyEvents Backend — API Routes Package
=========================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - families.py:       /api/families, /api/families/{id}/members
    - events.py:         /api/events, /api/events/{id}
    - media.py:          /api/events/{id}/media[/upload|/{media_id}], /api/files/{path}
    - comments.py:       /api/events/{id}/comments[/{comment_id}]
    - contributors.py:   /api/events/{id}/contributors[/{user_id}]
    - privacy.py:        /api/events/{id}/privacy[/{user_id}]
    - notifications.py:  /api/notifications[/{id}]
    - profile.py:        /api/profile, /api/auth/demo
    - health.py:         /health

Design Principle:
    Routes are thin: extract the request data, resolve the caller's
    Identity, call one service method, shape the response. Permission
    decisions belong to app.services.access_control.
"""
