"""HTTP and WebSocket handlers for the todo backend."""
