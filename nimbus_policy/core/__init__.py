"""Core engine: errors and the governance subpackage."""
