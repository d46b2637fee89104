"""DSARPilot API package."""
