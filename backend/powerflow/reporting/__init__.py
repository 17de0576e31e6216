"""Text reporting for load flow results."""
