"""Domain layer: vendor priority, replacement decisions, differential sync."""
