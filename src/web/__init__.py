"""HTTP boundary of the benefits wizard."""
