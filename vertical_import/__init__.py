"""Import vertical database dumps (``mysql -E`` style) into a model layer."""

__version__ = "0.3.0"
