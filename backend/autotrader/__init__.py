"""Auto-trading application: configuration, scheduling and paper trading."""
