"""
Service layer.

Each service encapsulates the business logic for a domain and talks
to the document store, so API handlers stay thin.
"""
