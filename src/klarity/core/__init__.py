"""Core types, constants and errors for the booking conversation engine."""
