"""
API package containing the HTTP routes.

``router`` exposes a top‑level router which includes all
domain‑specific endpoint modules.
"""
