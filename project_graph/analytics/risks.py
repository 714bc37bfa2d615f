"""Risk scoring for a project."""

from ..core import HIGH_RISK_SCORE, parse_int_prefix
from ..graph import GraphSnapshot


def risk_score(likelihood: str | None, impact: str | None) -> int | None:
    """likelihood x impact when both start with an integer."""
    likelihood_value = parse_int_prefix(likelihood)
    impact_value = parse_int_prefix(impact)
    if likelihood_value is None or impact_value is None:
        return None
    return likelihood_value * impact_value


def is_high_priority(info: dict) -> bool:
    if info["riskScore"] is not None:
        return info["riskScore"] >= HIGH_RISK_SCORE
    return info["impact"] == "high" or info["likelihood"] == "high"


def get_project_risks(snapshot: GraphSnapshot, project_name: str) -> dict:
    """
    Risks part_of the project, scored ones first by score descending.

    Raises ProjectNotFoundError.
    """
    project = snapshot.require_project(project_name)

    entries = []
    for risk in snapshot.part_of(project_name, "risk"):
        fields = snapshot.fields(risk)
        entries.append({
            "risk": risk,
            "info": {
                "description": fields.description,
                "likelihood": fields.likelihood,
                "impact": fields.impact,
                "status": fields.status,
                "mitigation": fields.mitigation,
                "riskScore": risk_score(fields.likelihood, fields.impact),
            },
            "affectedEntities": snapshot.sources(risk["name"], "impacted_by"),
        })

    entries.sort(key=lambda e: (
        e["info"]["riskScore"] is None,
        -(e["info"]["riskScore"] or 0),
    ))

    by_status: dict[str, list] = {}
    for entry in entries:
        by_status.setdefault(entry["info"]["status"], []).append(entry)

    def count(status: str) -> int:
        return len(by_status.get(status, []))

    high_priority = [e for e in entries if is_high_priority(e["info"])]

    return {
        "project": project,
        "risks": entries,
        "risksByStatus": by_status,
        "summary": {
            "totalRisks": len(entries),
            "highPriorityCount": len(high_priority),
            "mitigatedCount": count("mitigating"),
            "avoidedCount": count("avoided"),
            "acceptedCount": count("accepted"),
            "occurredCount": count("occurred"),
        },
        "highPriorityRisks": high_priority,
    }
