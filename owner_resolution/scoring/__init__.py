from __future__ import annotations

from .contacts import rank_contacts
from .distress import distress_inputs_from, distress_score
from .ownership import resolve_ownership
from .phones import rank_phones
from .verification import verify_lead

__all__: list[str] = [
    "rank_phones",
    "rank_contacts",
    "resolve_ownership",
    "distress_score",
    "distress_inputs_from",
    "verify_lead",
]
