"""
SQL Scaffold: generate layered API projects from relational schemas.
"""

__version__ = "0.1.0"
