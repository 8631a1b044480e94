"""Notification sinks for issued gift cards."""
