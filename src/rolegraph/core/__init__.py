"""Core configuration, logging and error types for RoleGraph."""
