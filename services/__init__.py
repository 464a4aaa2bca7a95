"""Todo sync client and backend services."""
