"""CLI tools for fsdb."""
