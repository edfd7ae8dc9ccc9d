# Routes package init
"""
East Village Everything — API Routes Package
==============================================

Route Inventory:
    - api.py:           GET /api/places, /api/tags, /api/tags/structured
    - admin_auth.py:    POST /admin/login, /admin/logout; GET /admin/api/me
    - admin_places.py:  /admin/api/places CRUD
    - admin_tags.py:    /admin/api/tags CRUD, bulk save, tree, parent choices
    - health.py:        GET /health

Routes stay thin: parse the request, call a service, turn None/False from
the service into NotFoundError, pick the status code.
"""
