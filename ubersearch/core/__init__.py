"""Core layer: settings, logging, exceptions, shared types."""
