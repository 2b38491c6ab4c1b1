"""Core building blocks shared by infrastructure and features."""
