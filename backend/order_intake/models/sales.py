"""AX sales order tables: SALESTABLE (header) and SALESLINE (line)."""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import BigInteger, Column, Date, DateTime, Numeric
from sqlmodel import Field, SQLModel


class SalesTable(SQLModel, table=True):
    """Sales order header.

    The pipeline writes one row per processed line item in ``per_item``
    grouping mode, or one row per submission in ``per_order`` mode.
    """

    __tablename__ = "salestable"

    recid: int = Field(sa_column=Column(BigInteger, primary_key=True, autoincrement=False))
    dataareaid: str = Field(max_length=4, index=True)
    salesid: str = Field(max_length=20, index=True)
    salesname: str = Field(default="", max_length=60)
    custaccount: str = Field(max_length=20)
    invoiceaccount: str = Field(default="", max_length=20)
    custgroup: str = Field(default="", max_length=10)
    deliveryaddress: str = Field(default="", max_length=250)
    purchorderformnum: str = Field(default="", max_length=20)
    customerref: str = Field(default="", max_length=60)
    deliverydate: date | None = Field(default=None, sa_column=Column(Date, nullable=True))
    shippingdaterequested: date | None = Field(default=None, sa_column=Column(Date, nullable=True))
    inventsiteid: str = Field(default="", max_length=10)
    inventlocationid: str = Field(default="", max_length=10)
    currencycode: str = Field(default="", max_length=3)
    dlvmode: str = Field(default="", max_length=10)
    languageid: str = Field(default="", max_length=7)
    salestype: int = 3
    salesstatus: int = 1
    salesresponsible: str = Field(default="", max_length=20)
    dimension: str = Field(default="", max_length=10)
    dimension2_: str = Field(default="", max_length=10)
    createddatetime: datetime = Field(sa_column=Column(DateTime, nullable=False))


class SalesLine(SQLModel, table=True):
    """Sales order line."""

    __tablename__ = "salesline"

    recid: int = Field(sa_column=Column(BigInteger, primary_key=True, autoincrement=False))
    dataareaid: str = Field(max_length=4, index=True)
    salesid: str = Field(max_length=20, index=True)
    linenum: Decimal = Field(default=Decimal(1), sa_column=Column(Numeric(28, 12), nullable=False, default=1))
    itemid: str = Field(max_length=20, index=True)
    name: str = Field(default="", max_length=1000)
    salesqty: Decimal = Field(default=Decimal(0), sa_column=Column(Numeric(28, 12), nullable=False, default=0))
    salesunit: str = Field(default="", max_length=10)
    qtyordered: Decimal = Field(default=Decimal(0), sa_column=Column(Numeric(28, 12), nullable=False, default=0))
    remainsalesphysical: Decimal = Field(default=Decimal(0), sa_column=Column(Numeric(28, 12), nullable=False, default=0))
    packingunit: str = Field(default="", max_length=10)
    packingunitqty: Decimal = Field(default=Decimal(0), sa_column=Column(Numeric(28, 12), nullable=False, default=0))
    masterunit: str = Field(default="", max_length=10)
    masterunitqty: Decimal = Field(default=Decimal(0), sa_column=Column(Numeric(28, 12), nullable=False, default=0))
    custgroup: str = Field(default="", max_length=10)
    custaccount: str = Field(default="", max_length=20)
    inventdimid: str = Field(default="", max_length=20)
    inventtransid: str = Field(default="", max_length=20)
    currencycode: str = Field(default="", max_length=3)
    salestype: int = 3
    salesstatus: int = 1
    shippingdaterequested: date | None = Field(default=None, sa_column=Column(Date, nullable=True))
    dimension: str = Field(default="", max_length=10)
    dimension2_: str = Field(default="", max_length=10)
    createddatetime: datetime = Field(sa_column=Column(DateTime, nullable=False))
