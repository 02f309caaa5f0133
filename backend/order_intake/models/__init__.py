"""Database models describing the existing AX schema.

These classes are used to build statements; the schema itself is owned by AX
and never created or migrated from here.
"""

from sqlmodel import SQLModel

from order_intake.models.customer import CustTable
from order_intake.models.inventory import InventDim, InventTable, InventTrans
from order_intake.models.number_sequence import NumberSequenceTable
from order_intake.models.sales import SalesLine, SalesTable

__all__ = [
    "SQLModel",
    "CustTable",
    "InventDim",
    "InventTable",
    "InventTrans",
    "NumberSequenceTable",
    "SalesLine",
    "SalesTable",
]
