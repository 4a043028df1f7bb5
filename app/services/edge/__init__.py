"""Edge opportunity detection and the shared edge/risk heuristics."""
