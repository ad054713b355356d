"""
Table Resolver Module

Decides which tables are loaded for a question.
"""

from .table_resolver import TableResolver, parse_table_references

__all__ = ["TableResolver", "parse_table_references"]
