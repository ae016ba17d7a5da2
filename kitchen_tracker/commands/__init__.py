"""Slash command registration for the kitchen tracker bot."""
