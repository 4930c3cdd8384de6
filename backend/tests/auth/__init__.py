"""Auth tests."""
