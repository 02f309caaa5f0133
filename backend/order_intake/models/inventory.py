"""AX inventory tables used by the order write and catalog lookups."""

from datetime import date
from decimal import Decimal

from sqlalchemy import BigInteger, Column, Date, Numeric
from sqlmodel import Field, SQLModel


class InventTrans(SQLModel, table=True):
    """Inventory transaction booked against a sales line."""

    __tablename__ = "inventtrans"

    recid: int = Field(sa_column=Column(BigInteger, primary_key=True, autoincrement=False))
    dataareaid: str = Field(max_length=4, index=True)
    inventtransid: str = Field(max_length=20, index=True)
    itemid: str = Field(max_length=20)
    qty: Decimal = Field(default=Decimal(0), sa_column=Column(Numeric(28, 12), nullable=False, default=0))
    custvendac: str = Field(default="", max_length=20)
    inventdimid: str = Field(default="", max_length=20)
    transrefid: str = Field(default="", max_length=20)  # SALESID of the owning order
    transtype: int = 0
    statusissue: int = 0
    statusreceipt: int = 0
    dateexpected: date | None = Field(default=None, sa_column=Column(Date, nullable=True))
    currencycode: str = Field(default="", max_length=3)


class InventDim(SQLModel, table=True):
    """Inventory dimension combination (site / warehouse / location)."""

    __tablename__ = "inventdim"

    recid: int = Field(sa_column=Column(BigInteger, primary_key=True, autoincrement=False))
    dataareaid: str = Field(max_length=4, index=True)
    inventdimid: str = Field(max_length=20, index=True)
    inventsiteid: str = Field(default="", max_length=10)
    inventlocationid: str = Field(default="", max_length=10)
    wmslocationid: str = Field(default="", max_length=10)


class InventTable(SQLModel, table=True):
    """Released item master."""

    __tablename__ = "inventtable"

    recid: int = Field(sa_column=Column(BigInteger, primary_key=True, autoincrement=False))
    dataareaid: str = Field(max_length=4, index=True)
    itemid: str = Field(max_length=20, index=True)
    itemname: str = Field(default="", max_length=60)
    dimension2_: str = Field(default="", max_length=10)
