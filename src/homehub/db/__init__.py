"""SQLite persistence for the household key/value store."""
