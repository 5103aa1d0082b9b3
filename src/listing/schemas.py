from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictStr, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from src.agent.errors import ListingValidationError
from .formatting import parse_decimal

STORY_MIN_CHARS = 10

_REQUIRED_MESSAGES = {
    "code": "Código é obrigatório.",
    "price": "Valor é obrigatório.",
    "neighborhood": "Bairro é obrigatório.",
    "city": "Cidade é obrigatória.",
    "features": "Características são obrigatórias.",
}

_AREA_LABELS = {
    "total_area": "Área total",
    "private_area": "Área privada",
}


class PropertyListing(BaseModel):
    """Structured fields of one listing, as typed by the agent (pt-BR)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    code: str = Field("", validation_alias=AliasChoices("code", "codigo"), validate_default=True)
    price: str = Field("", validation_alias=AliasChoices("price", "valor"), validate_default=True)
    neighborhood: str = Field("", validation_alias=AliasChoices("neighborhood", "bairro"), validate_default=True)
    city: str = Field("", validation_alias=AliasChoices("city", "cidade"), validate_default=True)
    total_area: Optional[float] = Field(None, validation_alias=AliasChoices("total_area", "areaTotal"))
    private_area: Optional[float] = Field(None, validation_alias=AliasChoices("private_area", "areaPrivada"))
    extra: Optional[str] = Field(None, validation_alias=AliasChoices("extra", "descricaoAdicional"))
    features: str = Field(
        "", validation_alias=AliasChoices("features", "caracteristicasPrincipais"), validate_default=True
    )

    @field_validator("code", "price", "neighborhood", "city", "features", mode="before")
    @classmethod
    def _required_text(cls, v: Any, info) -> str:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            v = str(v)
        if not isinstance(v, str) or not v.strip():
            raise PydanticCustomError("required", _REQUIRED_MESSAGES[info.field_name])
        return v.strip()

    @field_validator("total_area", "private_area", mode="before")
    @classmethod
    def _area(cls, v: Any, info) -> Optional[float]:
        label = _AREA_LABELS[info.field_name]
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            n: Optional[float] = float(v)
        elif isinstance(v, str):
            n = parse_decimal(v)
        else:
            n = None
        if n is None or math.isnan(n) or math.isinf(n):
            raise PydanticCustomError("area_invalid", f"{label} inválida.")
        # zero is accepted and means "not informed"
        if n < 0:
            raise PydanticCustomError("area_positive", f"{label} deve ser um número positivo.")
        return n

    @field_validator("extra", mode="before")
    @classmethod
    def _extra(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        if not isinstance(v, str):
            raise PydanticCustomError("extra_type", "Descrição adicional deve ser texto.")
        return v


class StoryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    text: str = Field("", validation_alias=AliasChoices("text", "inputText", "rawText"), validate_default=True)

    @field_validator("text", mode="before")
    @classmethod
    def _min_length(cls, v: Any) -> str:
        if not isinstance(v, str) or len(v.strip()) < STORY_MIN_CHARS:
            raise PydanticCustomError(
                "too_short", "A descrição deve ter pelo menos {min} caracteres.", {"min": STORY_MIN_CHARS}
            )
        return v.strip()


class SplitRequest(BaseModel):
    caption: str = Field(validation_alias=AliasChoices("caption", "storyText"))


# --- Model responses ----------------------------------------------------------
class FormatFeaturesOutput(BaseModel):
    formattedFeatures: StrictStr


class StoryTextOutput(BaseModel):
    storyText: StrictStr


# --- Validated value objects --------------------------------------------------
def _alias_map(model: type[BaseModel]) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for name, f in model.model_fields.items():
        out[name] = name
        alias = f.validation_alias
        if isinstance(alias, AliasChoices):
            for choice in alias.choices:
                if isinstance(choice, str):
                    out[choice] = name
    return out


def _field_errors(e: ValidationError, model: type[BaseModel]) -> Dict[str, str]:
    aliases = _alias_map(model)
    errors: Dict[str, str] = {}
    for err in e.errors():
        loc = err.get("loc") or ("__root__",)
        name = aliases.get(str(loc[0]), str(loc[0]))
        # first message per field wins
        errors.setdefault(name, err["msg"])
    return errors


@dataclass
class ListingValidation:
    listing: Optional[PropertyListing] = None
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.listing is not None

    def unwrap(self) -> PropertyListing:
        if self.listing is None:
            raise ListingValidationError(self.errors)
        return self.listing


@dataclass
class StoryValidation:
    request: Optional[StoryRequest] = None
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.request is not None

    def unwrap(self) -> StoryRequest:
        if self.request is None:
            raise ListingValidationError(self.errors)
        return self.request


def validate_listing(data: Any) -> ListingValidation:
    """Check raw form/JSON input once, before any composition runs. Never raises for bad input."""
    if isinstance(data, PropertyListing):
        return ListingValidation(listing=data)
    try:
        return ListingValidation(listing=PropertyListing.model_validate(data))
    except ValidationError as e:
        return ListingValidation(errors=_field_errors(e, PropertyListing))


def validate_story_request(data: Any) -> StoryValidation:
    if isinstance(data, StoryRequest):
        return StoryValidation(request=data)
    if isinstance(data, str):
        data = {"text": data}
    try:
        return StoryValidation(request=StoryRequest.model_validate(data))
    except ValidationError as e:
        return StoryValidation(errors=_field_errors(e, StoryRequest))
