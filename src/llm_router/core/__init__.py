"""Core routing engine: providers, resilience, routing table and metrics."""
