"""Data structures shared by the audit pipeline and the completion proxy."""
