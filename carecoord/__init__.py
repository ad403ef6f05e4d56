"""Community Care Coordinator: food-bank inventory, service schedule and AI assistant."""
