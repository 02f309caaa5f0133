"""API schemas for catalog lookups."""

from pydantic import BaseModel

from order_intake.services.catalog.catalog_service import CatalogItem, CustomerSummary, MasterUnits


class CatalogItemResponse(BaseModel):
    item_number: str
    item_name: str

    @classmethod
    def from_item(cls, item: CatalogItem) -> "CatalogItemResponse":
        return cls(item_number=item.item_number, item_name=item.item_name)


class MasterUnitsResponse(BaseModel):
    master_units: list[str]
    master_qty: str

    @classmethod
    def from_units(cls, units: MasterUnits) -> "MasterUnitsResponse":
        return cls(master_units=units.master_units, master_qty=units.master_qty)


class CustomerResponse(BaseModel):
    customer_account: str
    delivery_address: str

    @classmethod
    def from_summary(cls, customer: CustomerSummary) -> "CustomerResponse":
        return cls(customer_account=customer.customer_account, delivery_address=customer.delivery_address)
