"""
Photoshare Backend - Pydantic Request/Response Schemas
=======================================================

Wire format is camelCase (`likesCount`, `emailOrUsername`, `createdAt`);
Python attributes stay snake_case. FastAPI serializes responses by alias.
"""
