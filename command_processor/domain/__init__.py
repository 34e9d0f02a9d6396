"""Domain layer - commands, ports and error taxonomy."""
