"""
FastAPI application for hosting and joining kids' teaching events.

Subpackages: ``core`` (settings, logging, store, security, errors),
``schemas`` (pydantic models), ``services`` (business logic) and
``api`` (HTTP routes).
"""
