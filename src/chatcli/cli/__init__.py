"""Command-line interface for chat-cli."""
