"""SeidelFlow load flow engine."""
