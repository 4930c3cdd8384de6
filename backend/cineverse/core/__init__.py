"""Core settings, security and error handling."""
