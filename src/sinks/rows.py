"""
Flat row shape shared by the candidate sinks.
"""

from typing import Any, Dict

from src.extraction.models import Candidate
from src.orchestrator.interfaces import HandoffContext
from src.utils.date_utils import utc_now


def candidate_row(candidate: Candidate, context: HandoffContext) -> Dict[str, Any]:
    return {
        "profile_url": candidate.profile_url,
        "name": candidate.name,
        "title": candidate.title,
        "company": candidate.company,
        "location": candidate.location,
        "extraction_source": candidate.extraction_source.value,
        "target_company": context.unit.company,
        "target_role": context.unit.role,
        "company_id": context.unit.company_id,
        "role_id": context.unit.role_id,
        "run_id": context.run_id,
        "search_url": context.search_url,
        "created_at": utc_now().isoformat(),
    }
