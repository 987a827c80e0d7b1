"""HTTP and websocket routing."""
