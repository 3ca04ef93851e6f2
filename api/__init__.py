"""HTTP service exposing a trade-list analysis session."""
