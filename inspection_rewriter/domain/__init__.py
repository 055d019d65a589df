"""Value parsing, tolerance tracking and value regeneration."""
