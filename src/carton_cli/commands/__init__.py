"""carton CLI commands."""
