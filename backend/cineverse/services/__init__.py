"""Domain services called by the API layer and maintenance scripts."""
