"""Server-side page routes."""
