"""Kids Events API package."""
