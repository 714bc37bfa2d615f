"""Decision log of a project."""

from ..graph import GraphSnapshot


def get_decision_log(snapshot: GraphSnapshot, project_name: str) -> dict:
    """
    Decisions part_of the project, most recent first, undated last.

    Raises ProjectNotFoundError.
    """
    project = snapshot.require_project(project_name)

    entries = []
    for decision in snapshot.part_of(project_name, "decision"):
        fields = snapshot.fields(decision)
        entries.append({
            "decision": decision,
            "info": {
                "description": fields.description,
                "date": fields.date,
                "status": fields.status,
                "rationale": fields.rationale,
                "alternatives": fields.alternatives,
            },
            "involvedTeamMembers": snapshot.targets(decision["name"], "created_by", "teamMember"),
            "affectedEntities": snapshot.sources(decision["name"], "impacted_by"),
        })

    dated = [e for e in entries if snapshot.fields(e["decision"]).when is not None]
    undated = [e for e in entries if snapshot.fields(e["decision"]).when is None]
    dated.sort(key=lambda e: snapshot.fields(e["decision"]).when, reverse=True)
    entries = dated + undated

    by_status: dict[str, list] = {}
    for entry in entries:
        by_status.setdefault(entry["info"]["status"], []).append(entry)

    def count(status: str) -> int:
        return len(by_status.get(status, []))

    return {
        "project": project,
        "decisions": entries,
        "decisionsByStatus": by_status,
        "summary": {
            "totalDecisions": len(entries),
            "approvedCount": count("approved"),
            "implementedCount": count("implemented"),
            "rejectedCount": count("rejected"),
            "proposedCount": count("proposed"),
        },
    }
