"""Concrete collaborators: project loading, toolchain builder, report export."""
