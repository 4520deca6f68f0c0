"""End-to-end tests running the respawner CLI as a real process."""
