"""
Photoshare Backend - Services Layer
====================================

Business logic between the routes (HTTP) and the database.

Service Inventory:
    - TokenService:    issue/verify signed bearer tokens
    - UserService:     registration, lookup, password checks, login
    - PhotoService:    photos, the paginated feed, likes
    - CommentService:  comments on photos
    - FileService:     image upload validation, storage, serving, cleanup

Each module exposes a module-level singleton (`user_service`, ...) used by
the routes; tests construct their own instances where they need overrides.
"""
