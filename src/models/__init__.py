"""Data models for discovered resources and deletion runs."""
