"""Dashboard summary statistics."""
