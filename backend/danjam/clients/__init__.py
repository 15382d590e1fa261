"""HTTP client for the hotel backend."""
