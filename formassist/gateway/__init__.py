"""
Table Gateway Module

HTTP access to the form platform's table REST API.
"""

from .table_gateway import TableGateway

__all__ = ["TableGateway"]
