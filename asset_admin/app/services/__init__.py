"""Business operations behind the API routes."""
