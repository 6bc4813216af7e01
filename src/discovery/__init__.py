"""Tag-based resource discovery across AWS service categories."""
