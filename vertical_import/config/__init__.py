"""Configuration loading and configuration errors."""
