import pytest

from vendorhub.canonical.snapshot import EMPTY_SCHEMA, SchemaSnapshot
from vendorhub.core.errors import NotFound, SchemaDefinitionError, StaleSchemaError
from vendorhub.services import schema_store
from vendorhub.services.coercion import MISSING
from vendorhub.services.normalization import normalize

from fixtures_seed import restaurant_schema, vendor


def _orders(schema: SchemaSnapshot) -> list[tuple[str, int]]:
    return [(s.id, s.order) for s in schema.ordered_sections()]


def test_every_mutation_returns_a_new_version():
    s1 = schema_store.create_section(EMPTY_SCHEMA, expected_version=0, section_id="basics", label="Basics")
    s2 = schema_store.update_section(s1, "basics", expected_version=1, changes={"label": "Restaurant"})

    assert (EMPTY_SCHEMA.version, s1.version, s2.version) == (0, 1, 2)
    assert s1.get_section("basics").label == "Basics"
    assert s2.get_section("basics").label == "Restaurant"


def test_stale_expected_version_is_rejected():
    s = schema_store.create_section(EMPTY_SCHEMA, expected_version=0, section_id="basics", label="Basics")

    with pytest.raises(StaleSchemaError) as exc:
        schema_store.create_section(s, expected_version=0, section_id="pricing", label="Pricing")

    assert exc.value.actual_version == 1


def test_insert_at_order_shifts_later_sections():
    s = EMPTY_SCHEMA
    s = schema_store.create_section(s, expected_version=0, section_id="a", label="A")
    s = schema_store.create_section(s, expected_version=1, section_id="b", label="B")
    s = schema_store.create_section(s, expected_version=2, section_id="c", label="C", order=1)

    assert _orders(s) == [("c", 1), ("a", 2), ("b", 3)]


def test_reorder_sections_is_set_based():
    s = restaurant_schema()

    s2 = schema_store.reorder_sections(
        s, ["payout", "location", "pricing", "basics", "catering"], expected_version=s.version,
    )

    assert _orders(s2) == [("payout", 1), ("location", 2), ("pricing", 3), ("basics", 4), ("catering", 5)]


def test_reorder_requires_the_complete_list():
    s = restaurant_schema()

    with pytest.raises(SchemaDefinitionError):
        schema_store.reorder_sections(s, ["pricing", "basics"], expected_version=s.version)
    with pytest.raises(SchemaDefinitionError):
        schema_store.reorder_sections(
            s, ["basics", "basics", "pricing", "location", "catering", "payout"], expected_version=s.version,
        )
    with pytest.raises(NotFound):
        schema_store.reorder_sections(s, ["nope"], expected_version=s.version)


def test_reorder_fields_scoped_to_one_section():
    s = restaurant_schema()

    s2 = schema_store.reorder_fields(
        s, "pricing", ["storeCharge", "minimumOrderPrice", "commissionRate"], expected_version=s.version,
    )

    assert [(f.id, f.order) for f in s2.fields_in("pricing")] == [
        ("storeCharge", 1), ("minimumOrderPrice", 2), ("commissionRate", 3),
    ]
    assert [f.id for f in s2.fields_in("basics")] == [f.id for f in s.fields_in("basics")]


def test_field_ids_are_unique_across_sections():
    s = restaurant_schema()

    with pytest.raises(SchemaDefinitionError):
        schema_store.create_field(
            s, expected_version=s.version, field_id="city", section_id="pricing", label="City", type="text",
        )


def test_field_id_cannot_shadow_vendor_attribute():
    s = restaurant_schema()

    with pytest.raises(SchemaDefinitionError):
        schema_store.create_field(
            s, expected_version=s.version, field_id="status", section_id="basics", label="Status", type="text",
        )


def test_enum_fields_need_choices():
    s = restaurant_schema()

    with pytest.raises(SchemaDefinitionError):
        schema_store.create_field(
            s, expected_version=s.version, field_id="tags", section_id="basics", label="Tags", type="enum_multi",
        )


def test_unknown_section_is_not_found():
    with pytest.raises(NotFound):
        schema_store.create_field(
            EMPTY_SCHEMA, expected_version=0, field_id="x", section_id="ghost", label="X", type="text",
        )


def test_move_field_to_another_section_appends_and_renumbers():
    s = restaurant_schema()

    s2 = schema_store.update_field(s, "city", expected_version=s.version, changes={"section_id": "basics"})

    assert s2.get_field("city").section_id == "basics"
    assert s2.fields_in("basics")[-1].id == "city"
    assert [f.order for f in s2.fields_in("location")] == [1, 2]
    assert [f.order for f in s2.fields_in("basics")] == [1, 2, 3, 4, 5, 6]


def test_update_field_rejects_unknown_attributes():
    s = restaurant_schema()

    with pytest.raises(SchemaDefinitionError):
        schema_store.update_field(s, "city", expected_version=s.version, changes={"order": 9})


def test_delete_section_cascades_fields_but_keeps_vendor_data_as_passthrough():
    s = restaurant_schema()
    rec = vendor({"minimumOrderPrice": "250", "commissionRate": 12})

    s2 = schema_store.delete_section(s, "pricing", expected_version=s.version)

    assert not s2.fields_in("pricing")
    with pytest.raises(NotFound):
        s2.get_field("minimumOrderPrice")
    assert _orders(s2) == [("basics", 1), ("location", 2), ("catering", 3), ("payout", 4)]

    view = normalize(s2, rec)
    # no longer coerced: raw value survives as-is
    assert view["minimumOrderPrice"] == "250"
    assert view["commissionRate"] == 12


def test_delete_field_renumbers_siblings():
    s = restaurant_schema()

    s2 = schema_store.delete_field(s, "minimumOrderPrice", expected_version=s.version)

    assert [(f.id, f.order) for f in s2.fields_in("pricing")] == [("commissionRate", 1), ("storeCharge", 2)]
    assert normalize(s2, vendor({})).get("minimumOrderPrice") is not MISSING


def test_snapshot_round_trips_through_document():
    s = restaurant_schema()

    assert SchemaSnapshot.model_validate(s.to_document()) == s
