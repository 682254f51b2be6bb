import pytest

from services.sku_format import ParsedSku, format_sku, parse_sku, validate_format


def test_format_pads_sequence():
    assert format_sku("LT", "CHV", 1) == "EPG-LT-CHV-00001"
    assert format_sku("PWR", "QSC", 4321) == "EPG-PWR-QSC-04321"


@pytest.mark.parametrize(
    "cat, brand, seq",
    [("LT", "CHV", 1), ("AU", "SHU", 99999), ("EFX", "GEN", 250)],
)
def test_parse_inverts_format(cat, brand, seq):
    assert parse_sku(format_sku(cat, brand, seq)) == ParsedSku(cat, brand, seq)


@pytest.mark.parametrize(
    "cat, brand, seq",
    [
        ("", "CHV", 1),
        ("lt", "CHV", 1),
        ("LIGHT", "CHV", 1),
        ("LT", "CH", 1),
        ("LT", "CHV", 0),
        ("LT", "CHV", -3),
        ("LT", "CHV", 100000),
    ],
)
def test_format_rejects_bad_input(cat, brand, seq):
    with pytest.raises(ValueError):
        format_sku(cat, brand, seq)


@pytest.mark.parametrize(
    "sku",
    [
        "CUSTOM-001",
        "EPG-LT-CHV-1",
        "EPG-LT-CH-00001",
        "epg-lt-chv-00001",
        "EPG-LT-CHV-00000",
        "EPG-LT-CHV-00001-X",
        "",
        None,
    ],
)
def test_non_canonical_skus_do_not_parse(sku):
    assert parse_sku(sku) is None
    assert validate_format(sku) is False


def test_validate_format_accepts_canonical():
    assert validate_format("EPG-LT-CHV-00042")
