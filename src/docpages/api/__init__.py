"""HTTP API endpoints for the development server."""
