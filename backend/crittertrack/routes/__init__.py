# Routes package init
"""
CritterTrack Backend — API Routes Package
=========================================

Route Inventory:
    - auth.py:     POST /api/register, POST /api/login
    - users.py:    GET  /api/user, POST /api/profile
    - animals.py:  /api/animals[/{id}]           (authenticated CRUD)
    - litters.py:  /api/litters[/{id}]           (authenticated CRUD)
    - public.py:   /api/public/...               (read-only, no auth)
    - files.py:    POST /api/upload, GET /api/files/{path}
    - health.py:   GET  /health

Routes stay thin: parse the request, call one service method, shape the
response. Ownership checks and error mapping happen in the services.
"""
