"""Target-language backends."""
