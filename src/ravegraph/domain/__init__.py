"""Domain records and repository contracts."""
