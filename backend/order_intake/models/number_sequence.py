"""Number sequence model for generating order and inventory transaction ids."""

from sqlalchemy import BigInteger, Column
from sqlmodel import Field, SQLModel


class NumberSequenceTable(SQLModel, table=True):
    """Named counter keyed by (dataareaid, numbersequence).

    ``nextrec`` holds the next value to hand out as a string; its zero-padding
    width is preserved when the counter advances.
    """

    __tablename__ = "numbersequencetable"

    recid: int = Field(sa_column=Column(BigInteger, primary_key=True, autoincrement=False))
    dataareaid: str = Field(max_length=4, index=True)
    numbersequence: str = Field(max_length=20, index=True)
    nextrec: str = Field(default="1", max_length=20)
