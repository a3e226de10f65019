"""
Photoshare Backend - Middleware Package
========================================

Cross-cutting concerns applied to every request.

Execution order (outermost first):
    RateLimit → RequestID → RequestLogging → GZip → CORS → route

RateLimit runs first so rejected requests cost nothing downstream. RequestID
runs before RequestLogging so every access log line carries the ID.
"""
