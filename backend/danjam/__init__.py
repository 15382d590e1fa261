"""Danjam hotel booking client: pricing engine and booking API."""
