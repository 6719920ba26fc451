"""Domain layer: ports shared by the bounded contexts."""
