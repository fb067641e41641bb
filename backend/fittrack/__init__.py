"""Progress engine for a recurring weekly diet and workout schedule."""
