"""Application services for the onboarding portal."""
