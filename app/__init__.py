"""HTTP service exposing area aggregation."""
