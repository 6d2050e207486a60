# Routes package init
"""
Coleta Backend — API Routes Package
=====================================

Route Inventory:
    - auth.py:        POST /auth/login, GET /auth/me, PUT /auth/me
    - materials.py:   GET  /materials
    - weighings.py:   GET  /weighings/me, POST /weighings, POST /weighings/requests
    - leaderboard.py: GET  /leaderboard/top-collectors
    - health.py:      GET  /health

Routes stay THIN: parse the request, depend on get_current_worker where
authentication is required, call a service, return its schema.
"""
