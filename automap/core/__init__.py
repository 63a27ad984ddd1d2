"""Core configuration, enums, exceptions and version."""
