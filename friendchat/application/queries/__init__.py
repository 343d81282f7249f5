"""Read-side queries: conversation views, message history, friends, search."""
