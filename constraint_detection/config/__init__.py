"""Detection settings and presets."""
