"""Request-scoped data model for one property lookup."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class Source(str, Enum):
    DOB_PERMIT = "DOB Permit"
    DOB_PERMIT_OWNER = "DOB Permit (Owner)"
    DOB_PERMIT_APPLICANT = "DOB Permit (Applicant)"
    DOB_JOB_FILING = "DOB Job Filing"
    DOB_NOW_FILING = "DOB NOW Filing"
    DOB_NOW_OWNER = "DOB NOW (Owner)"
    DOB_NOW_PERMITTEE = "DOB NOW (Permittee)"
    HPD_REGISTRATION = "HPD Registration"


class RegistrationType(str, Enum):
    INDIVIDUAL_OWNER = "IndividualOwner"
    HEAD_OFFICER = "HeadOfficer"
    SITE_MANAGER = "SiteManager"
    MANAGING_AGENT = "ManagingAgent"
    CORPORATE_OWNER = "CorporateOwner"
    OTHER = "Other"

    @classmethod
    def from_label(cls, label: str | None) -> RegistrationType:
        text = (label or "").replace(" ", "").strip()
        if text == "Agent":
            return cls.MANAGING_AGENT
        for member in cls:
            if member.value.lower() == text.lower():
                return member
        return cls.OTHER


class ContactRole(str, Enum):
    OWNER_APPLICANT = "Owner/Applicant"
    INDIVIDUAL_OWNER = "Individual Owner"
    HEAD_OFFICER = "Head Officer"
    SITE_MANAGER = "Site Manager"
    MANAGING_AGENT = "Managing Agent"
    CORPORATE_OWNER = "Corporate Owner"
    PERMIT_APPLICANT = "Permit Applicant"


@dataclass(frozen=True)
class PropertyKey:
    """Borough/block/lot triple that filters every upstream feed."""

    boro: str
    block: str
    lot: str

    BOROUGHS = ("", "MANHATTAN", "BRONX", "BROOKLYN", "QUEENS", "STATEN ISLAND")

    @classmethod
    def parse(cls, boro: str | int, block: str | int, lot: str | int) -> PropertyKey:
        """Build a key from user input; every part must be numeric."""
        parts = [str(p).strip() for p in (boro, block, lot)]
        for label, value in zip(("boro", "block", "lot"), parts):
            if not value.isdigit():
                raise ValueError(f"{label} must be numeric, got {value!r}")
        boro_i, block_i, lot_i = (int(p) for p in parts)
        if not 1 <= boro_i <= 5:
            raise ValueError(f"boro must be 1-5, got {boro_i}")
        if block_i == 0 or lot_i == 0:
            raise ValueError("block and lot must be non-zero")
        return cls(str(boro_i), str(block_i), str(lot_i))

    @property
    def borough_name(self) -> str:
        try:
            return self.BOROUGHS[int(self.boro)]
        except (ValueError, IndexError):
            return ""

    def padded_block(self, width: int = 5) -> str:
        return self.block.zfill(width)

    def padded_lot(self, width: int = 5) -> str:
        return self.lot.zfill(width)

    def __str__(self) -> str:
        return f"{self.boro}-{self.block}-{self.lot}"


# --- Normalized entries ---


@dataclass
class RawContactEntry:
    phone: str
    name: str
    is_owner_role: bool
    source: Source
    event_date: str | None = None


@dataclass
class OwnerContact:
    name: str
    phone: str
    source: Source
    address: str = ""


@dataclass
class RegisteredContact:
    type: RegistrationType
    corporate_name: str = ""
    first_name: str = ""
    last_name: str = ""
    title: str = ""
    business_address: str = ""
    business_city: str = ""
    business_state: str = ""
    business_zip: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def address(self) -> str:
        parts = [self.business_address, self.business_city, self.business_state]
        return ", ".join(p for p in parts if p)


@dataclass
class Filing:
    job_type: str
    filing_date: str
    owner_name: str
    owner_business: str
    owner_phone: str
    source: str
    permittee: str = ""
    permittee_phone: str = ""
    units: int = 0
    stories: int = 0
    status: str = ""
    cost: str = ""
    description: str = ""


# --- Per-feed summaries ---


@dataclass
class TaxLot:
    address: str = ""
    owner_name: str = ""
    borough: str = ""
    units_res: int = 0
    units_total: int = 0
    year_built: int = 0
    num_floors: int = 0
    bldg_area: int = 0
    lot_area: int = 0
    assess_total: int = 0
    zone_dist: str = ""
    bldg_class: str = ""
    zip_code: str = ""


@dataclass
class ViolationSummary:
    total: int = 0
    open: int = 0
    class_a: int = 0
    class_b: int = 0
    class_c: int = 0


@dataclass
class ComplaintSummary:
    total: int = 0
    recent: int = 0
    top_types: list[tuple[str, int]] = field(default_factory=list)


@dataclass
class LitigationSummary:
    total: int = 0
    open: int = 0
    harassment_finding: bool = False
    respondents: list[str] = field(default_factory=list)
    types: list[tuple[str, int]] = field(default_factory=list)


@dataclass
class PenaltySummary:
    total: int = 0
    active: int = 0
    total_penalty: float = 0.0


@dataclass
class RentStabilization:
    building_id: str = ""
    unit_counts: dict[int, int] = field(default_factory=dict)

    def baseline(self) -> int:
        for year in sorted(self.unit_counts):
            if self.unit_counts[year] > 0:
                return self.unit_counts[year]
        return 0

    def latest(self) -> int:
        for year in sorted(self.unit_counts, reverse=True):
            if self.unit_counts[year] > 0:
                return self.unit_counts[year]
        return 0


@dataclass
class SpeculationListing:
    on_watch_list: bool = True
    deed_date: str = ""
    sale_price: float = 0.0
    cap_rate: str = ""
    borough_median_cap: str = ""


@dataclass
class ContactBatch:
    """Everything one contact-bearing feed contributed, already normalized."""

    phone_entries: list[RawContactEntry] = field(default_factory=list)
    owner_contacts: list[OwnerContact] = field(default_factory=list)
    registered_contacts: list[RegisteredContact] = field(default_factory=list)
    filings: list[Filing] = field(default_factory=list)


@dataclass
class FeedResults:
    """Accumulator with one slot per upstream feed.

    Each fan-out task owns exactly one slot, so no two tasks ever write the
    same attribute.
    """

    tax_lot: TaxLot | None = None
    violations: ViolationSummary = field(default_factory=ViolationSummary)
    complaints: ComplaintSummary = field(default_factory=ComplaintSummary)
    permits: ContactBatch = field(default_factory=ContactBatch)
    job_filings: ContactBatch = field(default_factory=ContactBatch)
    dob_now_filings: ContactBatch = field(default_factory=ContactBatch)
    registrations: ContactBatch = field(default_factory=ContactBatch)
    litigation: LitigationSummary = field(default_factory=LitigationSummary)
    penalties: PenaltySummary = field(default_factory=PenaltySummary)
    rent_stabilization: RentStabilization | None = None
    speculation: SpeculationListing | None = None

    @property
    def batches(self) -> list[ContactBatch]:
        # Order matters: it is the order contacts reach the ranker.
        return [self.permits, self.registrations, self.job_filings, self.dob_now_filings]

    @property
    def phone_entries(self) -> list[RawContactEntry]:
        return [e for b in self.batches for e in b.phone_entries]

    @property
    def owner_contacts(self) -> list[OwnerContact]:
        return [c for b in self.batches for c in b.owner_contacts]

    @property
    def registered_contacts(self) -> list[RegisteredContact]:
        return [c for b in self.batches for c in b.registered_contacts]

    @property
    def filings(self) -> list[Filing]:
        return [f for b in self.batches for f in b.filings]

    @property
    def tax_roll_owner(self) -> str:
        return self.tax_lot.owner_name if self.tax_lot else ""


# --- Derived artifacts ---


@dataclass
class PhoneGroup:
    normalized_phone: str
    display_phone: str
    members: list[RawContactEntry] = field(default_factory=list)
    score: int = 0
    reasons: list[str] = field(default_factory=list)
    is_primary: bool = False

    @property
    def names(self) -> list[str]:
        return list(dict.fromkeys(m.name for m in self.members if m.name))

    @property
    def sources(self) -> list[str]:
        return list(dict.fromkeys(m.source.value for m in self.members))

    @property
    def filing_count(self) -> int:
        return len(self.members)

    @property
    def reason(self) -> str:
        return ", ".join(self.reasons)


@dataclass
class RankedContact:
    name: str
    role: ContactRole
    source: Source
    score: int
    phone: str = ""
    email: str = ""
    address: str = ""
    enriched_by: list[str] = field(default_factory=list)

    @property
    def source_label(self) -> str:
        return " + ".join([self.source.value, *self.enriched_by])


@dataclass
class OwnershipResolution:
    best_guess_name: str | None = None
    confidence: int = 0
    reasoning: list[str] = field(default_factory=list)


@dataclass
class DistressInputs:
    open_violations: int = 0
    hazardous_violations: int = 0
    open_litigation: int = 0
    harassment_finding: bool = False
    penalty_balance: float = 0.0
    on_watch_list: bool = False
    regulated_units_baseline: int = 0
    regulated_units_latest: int = 0
    recent_complaints: int = 0


@dataclass
class DistressScore:
    total: int = 0
    signals: list[str] = field(default_factory=list)


@dataclass
class VerificationInputs:
    owner_name: str
    company_name: str = ""
    hpd_owner_match: bool = False
    pluto_owner_match: bool = False
    dob_filing_match: bool = False
    phone_found: bool = False
    phone_verified: bool = False
    dob_phone_found: bool = False
    dob_phone_cross_match: bool = False
    pdl_email_found: bool = False
    apollo_email_found: bool = False
    emails_agree: bool = False
    apollo_person_match: bool = False
    apollo_org_match: bool = False
    pdl_person_match: bool = False
    linkedin_found: bool = False


@dataclass
class VerificationFactor:
    name: str
    points: int
    max_points: int
    source: str
    matched: bool


@dataclass
class LeadVerification:
    """How well the lead owner and the contact data hold up across sources."""

    owner_name: str
    company_name: str = ""
    total: int = 0
    grade: str = "F"
    recommendation: str = ""
    verified: bool = False
    factors: list[VerificationFactor] = field(default_factory=list)
    details: list[str] = field(default_factory=list)


@dataclass
class Enrichment:
    pdl: dict[str, Any] | None = None
    apollo_person: dict[str, Any] | None = None
    apollo_org: dict[str, Any] | None = None
    apollo_key_people: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class BuildingProfile:
    key: PropertyKey
    feeds: FeedResults
    phone_rankings: list[PhoneGroup] = field(default_factory=list)
    ranked_contacts: list[RankedContact] = field(default_factory=list)
    ownership: OwnershipResolution = field(default_factory=OwnershipResolution)
    distress: DistressScore = field(default_factory=DistressScore)
    enrichment: Enrichment = field(default_factory=Enrichment)
    verification: LeadVerification | None = None
    feed_status: dict[str, dict[str, Any]] = field(default_factory=dict)

    @property
    def primary_phone(self) -> PhoneGroup | None:
        return next((g for g in self.phone_rankings if g.is_primary), None)

    def as_dict(self) -> dict[str, Any]:
        """Serialisable view for the presentation layer."""
        return {
            "property": {"boro": self.key.boro, "block": self.key.block, "lot": self.key.lot},
            "tax_lot": asdict(self.feeds.tax_lot) if self.feeds.tax_lot else None,
            "phone_rankings": [
                {
                    "phone": g.display_phone,
                    "normalized": g.normalized_phone,
                    "score": g.score,
                    "reason": g.reason,
                    "is_primary": g.is_primary,
                    "names": g.names,
                    "sources": g.sources,
                    "filing_count": g.filing_count,
                }
                for g in self.phone_rankings
            ],
            "ranked_contacts": [
                {
                    "name": c.name,
                    "phone": c.phone,
                    "email": c.email,
                    "role": c.role.value,
                    "source": c.source_label,
                    "score": c.score,
                    "address": c.address,
                }
                for c in self.ranked_contacts
            ],
            "ownership": asdict(self.ownership),
            "distress": asdict(self.distress),
            "violations": asdict(self.feeds.violations),
            "complaints": asdict(self.feeds.complaints),
            "litigation": asdict(self.feeds.litigation),
            "penalties": asdict(self.feeds.penalties),
            "speculation": asdict(self.feeds.speculation) if self.feeds.speculation else None,
            "filings": [asdict(f) for f in self.feeds.filings],
            "enrichment": asdict(self.enrichment),
            "verification": asdict(self.verification) if self.verification else None,
            "feed_status": self.feed_status,
        }
