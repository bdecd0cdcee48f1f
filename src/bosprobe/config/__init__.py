"""Configuration loading for bosprobe."""
