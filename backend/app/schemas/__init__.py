"""
Coleta Backend — Pydantic Request/Response Schemas
====================================================

API contracts are camelCase on the wire (the mobile client is JavaScript);
Python code uses snake_case attributes. Every schema inherits CamelModel.
"""
