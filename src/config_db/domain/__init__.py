"""Domain layer - key encoding and the configuration access services."""
