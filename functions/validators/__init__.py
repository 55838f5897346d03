"""Request validators for Costeo AI."""
