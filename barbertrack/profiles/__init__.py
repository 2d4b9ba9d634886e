"""Profiles module — admin and employee identities, roster, deactivation."""

from barbertrack.profiles.models import Profile

__all__ = ["Profile"]
