"""Configuration, constants, types and errors."""
