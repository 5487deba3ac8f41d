"""Infrastructure layer - audio backend implementations."""
