"""Parser and frontmatter adapters implementing the core ports."""
