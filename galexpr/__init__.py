"""Parse and evaluate expressions with variables, functions and objects."""

__version__ = "0.1.0"