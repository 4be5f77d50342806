"""Import services: mapping, reconciliation, entry points and run reporting."""
