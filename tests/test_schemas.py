from __future__ import annotations

import pytest

from src.agent.errors import ListingValidationError
from src.listing.schemas import (
    FormatFeaturesOutput,
    PropertyListing,
    validate_listing,
    validate_story_request,
)


def test_form_names_and_english_names_both_accepted(listing_payload):
    res = validate_listing(listing_payload)
    assert res.ok, res.errors
    listing = res.listing
    assert listing.code == "AP0123"
    assert listing.neighborhood == "Centro"
    assert listing.total_area == 120.0

    same = validate_listing(
        {"code": "AP0123", "price": "1", "neighborhood": "Centro", "city": "BH", "features": "x"}
    )
    assert same.ok


def test_missing_required_fields_report_per_field_messages():
    res = validate_listing({})
    assert not res.ok
    assert res.errors == {
        "code": "Código é obrigatório.",
        "price": "Valor é obrigatório.",
        "neighborhood": "Bairro é obrigatório.",
        "city": "Cidade é obrigatória.",
        "features": "Características são obrigatórias.",
    }


def test_blank_strings_count_as_missing(listing_payload):
    listing_payload["bairro"] = "   "
    res = validate_listing(listing_payload)
    assert res.errors == {"neighborhood": "Bairro é obrigatório."}


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("1.200,5", 1200.5),
        ("90", 90.0),
        (75.5, 75.5),
        (0, 0.0),
        ("", None),
        (None, None),
    ],
)
def test_area_inputs(listing_payload, raw, expected):
    listing_payload["areaTotal"] = raw
    res = validate_listing(listing_payload)
    assert res.ok, res.errors
    assert res.listing.total_area == expected


def test_negative_and_garbage_areas_rejected(listing_payload):
    listing_payload["areaTotal"] = -3
    listing_payload["areaPrivada"] = "muito grande"
    res = validate_listing(listing_payload)
    assert res.errors == {
        "total_area": "Área total deve ser um número positivo.",
        "private_area": "Área privada inválida.",
    }


def test_unwrap_raises_with_errors():
    with pytest.raises(ListingValidationError) as ei:
        validate_listing({"codigo": "X"}).unwrap()
    assert "code" not in ei.value.errors
    assert ei.value.errors["price"] == "Valor é obrigatório."


def test_already_validated_listing_passes_through():
    listing = PropertyListing(code="A", price="1", neighborhood="B", city="C", features="D")
    assert validate_listing(listing).listing is listing


def test_story_request_min_length():
    assert validate_story_request("casa com 4 quartos").ok
    res = validate_story_request({"inputText": "curto"})
    assert res.errors == {"text": "A descrição deve ter pelo menos 10 caracteres."}


def test_feature_output_requires_string():
    with pytest.raises(Exception):
        FormatFeaturesOutput.model_validate({"formattedFeatures": 3})
