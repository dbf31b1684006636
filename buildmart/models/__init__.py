# package marker for buildmart.models

# Import all models to ensure relationships are properly initialized
from buildmart.models.user import User
from buildmart.models.company import Company, CompanyType
from buildmart.models.categories import ItemCategory
from buildmart.models.items import Item
from buildmart.models.jobs import Job
from buildmart.models.lookups import Location, Unit, Rfq

__all__ = [
    "User",
    "Company",
    "CompanyType",
    "ItemCategory",
    "Item",
    "Job",
    "Location",
    "Unit",
    "Rfq",
]
