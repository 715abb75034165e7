"""HTTP surface for the Redis status report."""
