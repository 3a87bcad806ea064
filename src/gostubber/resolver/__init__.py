"""Source resolution: load and type-check Go packages."""
