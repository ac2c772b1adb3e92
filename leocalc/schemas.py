from pydantic import BaseModel, Field
from typing import Optional, List, Union, Literal, Annotated
from datetime import datetime

# Form inputs arrive as numbers or as whatever the user typed. Calculators coerce.
NumberInput = Union[float, str, None]

LengthUnit = Literal["m", "ft", "cm", "in", "mm"]
SupplyStatus = Literal["Planned", "In Transit", "Partial", "Received"]


# --- Calculator inputs ---

class PricingInputs(BaseModel):
    pp_rate: NumberInput = 115.42
    conversion_cost: NumberInput = 28.35
    bag_weight: NumberInput = 185  # grams
    transport_per_bag: NumberInput = 2.50
    profit_margin: NumberInput = 18


class FreightInputs(BaseModel):
    unit: LengthUnit = "m"
    vehicle_l: NumberInput = 12.03
    vehicle_w: NumberInput = 2.35
    vehicle_h: NumberInput = 2.39
    bale_l: NumberInput = 1.2
    bale_w: NumberInput = 1.0
    bale_h: NumberInput = 1.1
    freight_charge: NumberInput = 50000
    efficiency: NumberInput = 92
    pallet_capacity: NumberInput = 450  # kg
    unit_weight: NumberInput = None  # kg per piece
    custom_count: NumberInput = None


# --- Schedule workspace ---

class PODetails(BaseModel):
    customer_name: str = ""
    customer_email: str = ""
    po_number: str = ""
    total_qty: NumberInput = 0


class VendorAllocation(BaseModel):
    name: str
    email: str = ""
    allocated_qty: NumberInput = 0


class SupplyRow(BaseModel):
    id: Optional[int] = None
    week: str = ""
    vendor: str = ""
    planned_qty: NumberInput = 0
    date: Optional[str] = None
    status: SupplyStatus = "Planned"
    notes: str = ""


class SupplyRowUpdate(BaseModel):
    vendor: Optional[str] = None
    planned_qty: NumberInput = None
    date: Optional[str] = None
    status: Optional[SupplyStatus] = None
    notes: Optional[str] = None


class Product(BaseModel):
    id: Optional[int] = None
    name: str = ""
    qty: NumberInput = 0
    vendor_cost: NumberInput = 0
    customer_price: NumberInput = 0


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    qty: NumberInput = None
    vendor_cost: NumberInput = None
    customer_price: NumberInput = None
    margin_percent: NumberInput = None  # back-solves customer_price


# --- Archive snapshots (tagged by type) ---

class CalculatorSnapshot(BaseModel):
    type: Literal["calculator"] = "calculator"
    pricing: PricingInputs = Field(default_factory=PricingInputs)
    freight: FreightInputs = Field(default_factory=FreightInputs)


class ScheduleSnapshot(BaseModel):
    type: Literal["schedule"] = "schedule"
    po_details: PODetails = Field(default_factory=PODetails)
    vendors: List[VendorAllocation] = []
    supplies: List[SupplyRow] = []


class QuantitiesSnapshot(BaseModel):
    type: Literal["quantities"] = "quantities"
    products: List[Product] = []


ArchiveData = Annotated[
    Union[CalculatorSnapshot, ScheduleSnapshot, QuantitiesSnapshot],
    Field(discriminator="type"),
]


class ArchiveCreate(BaseModel):
    company_name: str
    record_name: Optional[str] = None
    data: ArchiveData


class ArchiveUpdate(BaseModel):
    company_name: Optional[str] = None
    record_name: Optional[str] = None
    data: Optional[ArchiveData] = None


class Archive(BaseModel):
    id: int
    type: str
    company_name: str
    record_name: Optional[str] = None
    data: ArchiveData
    created_at: datetime
    updated_at: Optional[datetime] = None
    class Config:
        from_attributes = True


class ArchivePage(BaseModel):
    items: List[Archive]
    page: int
    total_pages: int
    total: int
