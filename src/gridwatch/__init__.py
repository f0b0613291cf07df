"""gridwatch notification watcher."""
