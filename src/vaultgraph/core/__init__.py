"""Pure link-resolution core: model, extraction, destination parsing, resolution."""
