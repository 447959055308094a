"""
Pydantic schema definitions for API payloads and stored documents.

Each domain (events, users) defines its own models.  Wire names are
camelCase; Python attributes are snake_case.
"""
