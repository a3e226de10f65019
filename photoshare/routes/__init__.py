"""
Photoshare Backend - API Routes Package
========================================

Route Inventory:
    - auth.py:      POST /auth/register, POST /auth/login
    - photos.py:    POST /photos, GET /photos, GET /photos/{id},
                    POST|DELETE /photos/{id}/like
    - comments.py:  POST|GET /photos/{id}/comments
    - uploads.py:   GET /uploads/{name}
    - health.py:    GET /, GET /health

Routes stay thin: extract request data, call one service, shape the response.
Errors propagate as PhotoshareError subclasses to the global handlers.
"""
