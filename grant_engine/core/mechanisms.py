"""Catalog of supported grant funding mechanisms."""

from enum import Enum

from pydantic import BaseModel, Field


class Agency(str, Enum):
    """Funding agency."""

    NIH = "NIH"
    DOD_CDMRP = "DOD_CDMRP"
    CPRIT = "CPRIT"
    NSF = "NSF"


class Mechanism(BaseModel):
    """A funding mechanism an application can be written against."""

    id: str = Field(..., description="Mechanism identifier (e.g., 'R01')")
    name: str = Field(..., description="Display name")
    agency: Agency = Field(..., description="Funding agency")
    description: str = Field(default="", description="Scope and typical award size")


_REVIEWER_PERSONAS: dict[Agency, str] = {
    Agency.NIH: "an expert NIH study section reviewer",
    Agency.DOD_CDMRP: "an expert DoD CDMRP peer review panel member",
    Agency.CPRIT: "an expert CPRIT scientific review panel member",
    Agency.NSF: "an expert NSF SBIR/STTR review panelist",
}


def _m(id: str, name: str, agency: Agency, description: str) -> Mechanism:
    return Mechanism(id=id, name=name, agency=agency, description=description)


MECHANISMS: dict[str, Mechanism] = {
    m.id: m
    for m in [
        # NIH
        _m("R43", "SBIR Phase I (R43)", Agency.NIH,
           "Small Business Innovation Research Phase I - feasibility study up to $293,697 total costs"),
        _m("R44", "SBIR Phase II (R44)", Agency.NIH,
           "Small Business Innovation Research Phase II - full R&D up to $1,956,460 total costs"),
        _m("SBIR_FAST_TRACK", "SBIR Fast-Track", Agency.NIH,
           "Combined Phase I and II application"),
        _m("R44_PHASE_IIB", "SBIR Phase IIB", Agency.NIH,
           "Competing continuation for additional Phase II funding"),
        _m("R41", "STTR Phase I (R41)", Agency.NIH,
           "Small Business Technology Transfer Phase I - requires research institution partnership"),
        _m("R42", "STTR Phase II (R42)", Agency.NIH,
           "Small Business Technology Transfer Phase II - full R&D with research institution"),
        _m("STTR_FAST_TRACK", "STTR Fast-Track", Agency.NIH,
           "Combined STTR Phase I and II application"),
        _m("R01", "NIH R01 Research Project Grant", Agency.NIH,
           "Standard investigator-initiated research grant. Up to $500K/year direct costs for up to 5 years."),
        # DoD CDMRP
        _m("DOD_IDEA", "Idea Award", Agency.DOD_CDMRP,
           "Innovative, high-risk/high-reward research concepts. Typically $100K-$300K for 1-2 years."),
        _m("DOD_IIRA", "Investigator-Initiated Research Award", Agency.DOD_CDMRP,
           "Independent research ideas from investigators. Up to $600K for 3 years."),
        _m("DOD_CDA", "Career Development Award", Agency.DOD_CDMRP,
           "Early-career researchers developing independent programs. Up to $360K for 3 years."),
        _m("DOD_TRA", "Translational Research Award", Agency.DOD_CDMRP,
           "Bridges basic research to clinical application. Up to $1M for 3 years."),
        _m("DOD_CTA", "Clinical Trial Award", Agency.DOD_CDMRP,
           "Clinical trials for cancer interventions. Up to $4M for 4 years."),
        _m("DOD_SBIR_I", "DoD SBIR Phase I", Agency.DOD_CDMRP,
           "Small business feasibility study. Up to $250K for 6-12 months."),
        _m("DOD_SBIR_II", "DoD SBIR Phase II", Agency.DOD_CDMRP,
           "Full R&D of Phase I concept. Up to $1.7M for 2 years."),
        _m("DOD_STTR_I", "DoD STTR Phase I", Agency.DOD_CDMRP,
           "Small business/research institution partnership. Up to $250K for 12 months."),
        _m("DOD_STTR_II", "DoD STTR Phase II", Agency.DOD_CDMRP,
           "Full STTR R&D. Up to $1.7M for 2 years."),
        # CPRIT
        _m("CPRIT_IIRA", "CPRIT Individual Investigator Research Award", Agency.CPRIT,
           "Innovative cancer research by Texas-based investigators. Up to $900K for 3 years."),
        _m("CPRIT_ETRA", "CPRIT Early Translational Research Award", Agency.CPRIT,
           "Bridges discovery to early clinical development. Up to $2M for 3 years."),
        _m("CPRIT_PDRA", "CPRIT Product Development Research Award", Agency.CPRIT,
           "Late-stage product development toward commercialization. Up to $20M over multiple years."),
        # NSF
        _m("NSF_SBIR_I", "NSF SBIR/STTR Phase I", Agency.NSF,
           "Small Business Innovation Research Phase I - feasibility study up to $275,000 for 6-12 months"),
    ]
}


def get_mechanism(mechanism_id: str | None) -> Mechanism | None:
    """Look up a mechanism by id (case-insensitive). Returns None if unknown."""
    if not mechanism_id:
        return None
    return MECHANISMS.get(mechanism_id.strip().upper())


def list_mechanisms(agency: Agency | None = None) -> list[Mechanism]:
    """List mechanisms in catalog order, optionally filtered by agency."""
    return [m for m in MECHANISMS.values() if agency is None or m.agency == agency]


def reviewer_persona(agency: Agency) -> str:
    """Review-panel framing used when asking the judge to score an application."""
    return _REVIEWER_PERSONAS[agency]
