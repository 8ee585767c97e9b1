"""Core splitting components: separators, recursive splitter, packer and facade."""
