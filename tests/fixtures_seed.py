from vendorhub.canonical.snapshot import EMPTY_SCHEMA, SchemaSnapshot
from vendorhub.canonical.vendor import VendorRecord
from vendorhub.services import schema_store


def pricing_schema() -> SchemaSnapshot:
    """Section "Pricing" (order 1) holding a single required number field."""
    s = schema_store.create_section(EMPTY_SCHEMA, expected_version=0, section_id="pricing", label="Pricing")
    return schema_store.create_field(
        s,
        expected_version=s.version,
        field_id="minimumOrderPrice",
        section_id="pricing",
        label="Minimum order price",
        type="number",
        required=True,
        rules={"min_value": 0, "max_value": 10000},
    )


def restaurant_schema() -> SchemaSnapshot:
    s = EMPTY_SCHEMA
    s = schema_store.create_section(s, expected_version=s.version, section_id="basics", label="Restaurant Information")
    s = schema_store.create_section(s, expected_version=s.version, section_id="pricing", label="Pricing")
    s = schema_store.create_section(s, expected_version=s.version, section_id="location", label="Location")
    s = schema_store.create_section(
        s, expected_version=s.version, section_id="catering", label="Catering", vendor_types=["caterer"],
    )
    s = schema_store.create_section(
        s, expected_version=s.version, section_id="payout", label="Bank Details", visibility=["admin"],
    )

    fields = [
        ("restaurantName", "basics", "text", True, {"min_length": 2, "max_length": 120}),
        ("restaurantImage", "basics", "image_reference", False, {}),
        ("isPureVeg", "basics", "boolean", False, {}),
        ("cuisine", "basics", "enum_single", False, {"choices": ["indian", "chinese", "italian"]}),
        ("categories", "basics", "enum_multi", False, {"choices": ["biryani", "pizza", "desserts"]}),
        ("minimumOrderPrice", "pricing", "number", True, {"min_value": 0, "max_value": 10000}),
        ("commissionRate", "pricing", "number", False, {"min_value": 0, "max_value": 100}),
        ("storeCharge", "pricing", "currency", False, {}),
        ("fullAddress", "location", "text", True, {}),
        ("city", "location", "text", False, {}),
        ("pickupLat", "location", "geo_coordinate", False, {"min_value": -90, "max_value": 90}),
        ("maxGuests", "catering", "number", False, {}),
        ("accountNumber", "payout", "text", False, {}),
    ]
    for field_id, section_id, ftype, required, rules in fields:
        s = schema_store.create_field(
            s,
            expected_version=s.version,
            field_id=field_id,
            section_id=section_id,
            label=field_id,
            type=ftype,
            required=required,
            rules=rules,
        )
    return s


def vendor(form_data: dict | None = None, **kw) -> VendorRecord:
    data = {
        "_id": "vnd_1",
        "vendor_type": "restaurant",
        "status": "approved",
        "latitude": "19.0760",
        "longitude": 72.8777,
        "formData": form_data or {},
    }
    data.update(kw)
    return VendorRecord.model_validate(data)
