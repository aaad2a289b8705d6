# Routes package init
"""
FreePaste — Routes Package
============================

Route Inventory:
    - pastes.py:  POST /api/new, GET /api/get/{id}, POST /api/is_owner/{id},
                  POST /api/edit/{id}, POST /api/profile
    - raw.py:     GET  /raw/{id}
    - health.py:  GET  /health
    - pages.py:   GET  /, GET /{id}   (registered last)

Routes stay thin: extract data from the request, call PasteService, shape
the response. Owner-token precedence lives in dependencies.py.
"""
