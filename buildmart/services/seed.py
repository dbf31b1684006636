"""
Reference data: item categories, company types, cities and units.
Seeding only runs against a database that has no categories yet.
"""
import logging

from sqlalchemy.orm import Session

from buildmart.models.categories import ItemCategory
from buildmart.models.company import CompanyType
from buildmart.models.items import UNITS
from buildmart.models.lookups import Location, Unit

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

COMPANY_TYPES = [
    ("company-type-contractor", "Contractor"),
    ("company-type-supplier", "Supplier"),
    ("company-type-manufacturer", "Manufacturer"),
    ("company-type-consultant", "Consultant"),
]

# (id, label, parent id)
PRODUCT_CATEGORIES = [
    ("cat-cement-concrete", "Cement & Concrete", None),
    ("cat-portland-cement", "Portland Cement", "cat-cement-concrete"),
    ("cat-ready-mix-concrete", "Ready-Mix Concrete", "cat-cement-concrete"),
    ("cat-concrete-blocks", "Concrete Blocks", "cat-cement-concrete"),
    ("cat-steel-metals", "Steel & Metals", None),
    ("cat-rebar", "Rebar", "cat-steel-metals"),
    ("cat-structural-steel", "Structural Steel", "cat-steel-metals"),
    ("cat-aluminum-profiles", "Aluminum Profiles", "cat-steel-metals"),
    ("cat-wood-timber", "Wood & Timber", None),
    ("cat-lumber", "Lumber", "cat-wood-timber"),
    ("cat-plywood", "Plywood", "cat-wood-timber"),
    ("cat-mdf", "MDF", "cat-wood-timber"),
    ("cat-roofing-materials", "Roofing Materials", None),
    ("cat-corrugated-iron-sheets", "Corrugated Iron Sheets", "cat-roofing-materials"),
    ("cat-roof-tiles", "Roof Tiles", "cat-roofing-materials"),
    ("cat-waterproofing-membranes", "Waterproofing Membranes", "cat-roofing-materials"),
    ("cat-finishing-materials", "Finishing Materials", None),
    ("cat-paints-coatings", "Paints & Coatings", "cat-finishing-materials"),
    ("cat-floor-tiles", "Floor Tiles", "cat-finishing-materials"),
    ("cat-wallpapers", "Wallpapers", "cat-finishing-materials"),
    ("cat-plumbing-sanitation", "Plumbing & Sanitation", None),
    ("cat-pipes-fittings", "Pipes & Fittings", "cat-plumbing-sanitation"),
    ("cat-water-heaters", "Water Heaters", "cat-plumbing-sanitation"),
    ("cat-sanitary-ware", "Sanitary Ware", "cat-plumbing-sanitation"),
    ("cat-electrical-supplies", "Electrical Supplies", None),
    ("cat-cables-wires", "Cables & Wires", "cat-electrical-supplies"),
    ("cat-switches-sockets", "Switches & Sockets", "cat-electrical-supplies"),
    ("cat-lighting-fixtures", "Lighting Fixtures", "cat-electrical-supplies"),
]

SERVICE_CATEGORIES = [
    ("cat-consulting", "Consulting", None),
    ("cat-construction-services", "Construction Services", None),
    ("cat-general-contracting", "General Contracting", "cat-construction-services"),
    ("cat-sub-contracts", "Sub Contracts", "cat-construction-services"),
    ("cat-carpentry", "Carpentry", "cat-sub-contracts"),
    ("cat-masonry", "Masonry", "cat-sub-contracts"),
    ("cat-plumbing", "Plumbing", "cat-sub-contracts"),
    ("cat-concrete-work", "Concrete Work", "cat-sub-contracts"),
    ("cat-electrical-installation", "Electrical Installation", "cat-sub-contracts"),
    ("cat-painting-finishing", "Painting & Finishing", "cat-sub-contracts"),
    ("cat-landscaping", "Landscaping", "cat-construction-services"),
    ("cat-labour-work", "Labour Work", None),
    ("cat-skilled-labour", "Skilled Labour", "cat-labour-work"),
    ("cat-unskilled-labour", "Unskilled Labour", "cat-labour-work"),
    ("cat-equipment-rental", "Equipment Rental", None),
    ("cat-heavy-equipment", "Heavy Equipment", "cat-equipment-rental"),
    ("cat-light-equipment", "Light Equipment", "cat-equipment-rental"),
]

TENDER_CATEGORIES = [
    "Construction",
    "Services",
    "Supplies",
    "Consultancy",
    "Building Construction",
    "Road and Bridge Construction",
    "Water System Installation",
    "Architectural and Consulting",
    "Irrigation Works",
    "Finishing Works",
    "Water Proofing Works",
    "Sewerage",
    "Water Well Drilling",
    "Building and Finishing Materials",
    "Construction Machinery",
]

CITIES = [
    ("Addis Ababa", "Addis Ababa"),
    ("Dire Dawa", "Dire Dawa"),
    ("Adama", "Oromia"),
    ("Jimma", "Oromia"),
    ("Bahir Dar", "Amhara"),
    ("Gondar", "Amhara"),
    ("Dessie", "Amhara"),
    ("Hawassa", "Sidama"),
    ("Mekelle", "Tigray"),
    ("Harar", "Harari"),
]


def _slug(label: str) -> str:
    return "tender-category-" + "-".join(label.lower().split())


def seed_reference_data(db: Session) -> bool:
    """
    Insert the reference data; returns False (and writes nothing) when the
    database already holds categories.
    """
    if db.query(ItemCategory).first() is not None:
        logger.info("Reference data already present, skipping seed")
        return False

    for type_id, name in COMPANY_TYPES:
        if db.query(CompanyType).filter(CompanyType.name == name).first() is None:
            db.add(CompanyType(id=type_id, name=name))

    # Parents precede their children in both lists
    for kind, rows in (("product", PRODUCT_CATEGORIES), ("service", SERVICE_CATEGORIES)):
        for cat_id, label, parent_id in rows:
            db.add(ItemCategory(id=cat_id, category=label, type=kind, parent_id=parent_id))
        db.flush()

    for label in TENDER_CATEGORIES:
        db.add(ItemCategory(id=_slug(label), category=label, type="tender"))

    for city, region in CITIES:
        db.add(Location(city=city, region=region))

    for name in UNITS:
        if db.query(Unit).filter(Unit.name == name).first() is None:
            db.add(Unit(name=name))

    db.commit()
    logger.info(
        f"Seeded {len(PRODUCT_CATEGORIES) + len(SERVICE_CATEGORIES) + len(TENDER_CATEGORIES)} categories, "
        f"{len(COMPANY_TYPES)} company types, {len(CITIES)} cities"
    )
    return True
