"""Profile store adapters and session lifecycle."""
