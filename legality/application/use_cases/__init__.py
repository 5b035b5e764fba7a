"""Use cases: cases and tasks, dashboard counters, admin directory, hours requests."""
