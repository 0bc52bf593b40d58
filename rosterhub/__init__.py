"""Volunteer event roster and attendance service."""
