"""Domain layer: view objects and pure inference over daemon data."""
