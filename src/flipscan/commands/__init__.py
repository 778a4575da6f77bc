"""flipscan CLI Commands - Subcommand implementations."""
