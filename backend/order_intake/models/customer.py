"""AX customer master (CUSTTABLE)."""

from sqlalchemy import BigInteger, Column
from sqlmodel import Field, SQLModel


class CustTable(SQLModel, table=True):
    """Customer master record."""

    __tablename__ = "custtable"

    recid: int = Field(sa_column=Column(BigInteger, primary_key=True, autoincrement=False))
    dataareaid: str = Field(max_length=4, index=True)
    accountnum: str = Field(max_length=20, index=True)
    name: str = Field(default="", max_length=60)
    address: str = Field(default="", max_length=250)
    custgroup: str = Field(default="", max_length=10)
