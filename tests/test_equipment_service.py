import pytest

from services import equipment_service
from services.errors import AllocationExhaustedError, ValidationError


def test_insert_race_on_generated_sku_is_retryable(session, catalog, add_unit, monkeypatch):
    add_unit("EPG-LT-CHV-00001")
    monkeypatch.setattr(equipment_service, "generate_sku", lambda *_: "EPG-LT-CHV-00001")

    data = {"equipment_model": catalog["model"], "brand": catalog["chauvet"]}
    with pytest.raises(AllocationExhaustedError) as info:
        equipment_service.create_unit(session, data)
    assert info.value.status_code == 503
    assert info.value.last_candidate == "EPG-LT-CHV-00001"


def test_insert_race_on_manual_sku_is_a_validation_error(session, catalog, add_unit, monkeypatch):
    add_unit("LEGACY-1")
    monkeypatch.setattr(equipment_service, "generate_sku", lambda *_: "LEGACY-1")

    with pytest.raises(ValidationError, match="already exists"):
        equipment_service.create_unit(session, {"sku": "legacy-1"})
    monkeypatch.undo()
    # The session is usable again after the rollback.
    unit = equipment_service.create_unit(session, {"sku": "LEGACY-2"})
    assert unit.sku == "LEGACY-2"
