from __future__ import annotations

from typing import List

from src.agent.errors import UpstreamEmptyError
from .formatting import format_brl, format_number
from .schemas import PropertyListing

STATE = "MG"
FEATURES_HEADER = "CARACTERÍSTICAS PRINCIPAIS:"

CONTACT_LINES = (
    "Agende uma visita hoje mesmo com nossa equipe:",
    "📲(31) 9 9859 0590 / 3058-1600",
    "Avenida Acadêmico Nilo Figueiredo, 3273, Santos Dumont II, Lagoa Santa/MG",
)


def location_line(listing: PropertyListing) -> str:
    return f"{listing.neighborhood.upper()} - {listing.city.upper()}/{STATE}"


def assemble_description(listing: PropertyListing, features_block: str) -> str:
    """
    Build the final listing text from validated fields and the formatted
    feature block. Empty strings in `parts` are paragraph breaks.

    Raises UpstreamEmptyError when `features_block` is empty or not a string;
    nothing is assembled in that case.
    """
    if not isinstance(features_block, str) or not features_block.strip():
        raise UpstreamEmptyError("A IA não conseguiu formatar as características.")

    parts: List[str] = [location_line(listing), "", f"Código do imóvel: {listing.code}"]

    extra = (listing.extra or "").strip()
    if extra:
        parts += ["", extra]

    parts += ["", FEATURES_HEADER, features_block.lstrip(), ""]
    parts.append(f"Área Total: {format_number(listing.total_area)} m²")
    parts.append(f"Área Privada: {format_number(listing.private_area)} m²")
    parts += [f"💰VALOR: {format_brl(listing.price)}", ""]
    parts.extend(CONTACT_LINES)

    return "\n".join(parts)
