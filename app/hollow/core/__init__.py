"""Core scanning machinery: traversal engine, controller and collaborators."""
