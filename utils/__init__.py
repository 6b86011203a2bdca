"""Shared helpers: exceptions, error handling, enums, cancellation, constants and file I/O."""
