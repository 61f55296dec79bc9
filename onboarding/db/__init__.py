"""Database layer for the onboarding portal."""
