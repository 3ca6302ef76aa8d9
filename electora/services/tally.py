def tally_election(candidates):
    candidates = list(candidates)
    total_votes = sum(candidate.vote_count for candidate in candidates)
    max_votes = max((candidate.vote_count for candidate in candidates), default=0)

    winners = []
    if max_votes > 0:
        winners = [
            candidate for candidate in candidates if candidate.vote_count == max_votes
        ]

    candidate_results = []
    for candidate in candidates:
        count = candidate.vote_count
        percent = (count / total_votes * 100) if total_votes > 0 else 0
        candidate_results.append(
            {"candidate": candidate, "count": count, "percent": percent}
        )

    candidate_results.sort(
        key=lambda row: (
            -row["count"],
            row["candidate"].name.lower(),
            row["candidate"].id,
        )
    )

    return {
        "total_votes": total_votes,
        "candidate_results": candidate_results,
        "winner": winners[0] if len(winners) == 1 else None,
        "winners": winners,
        "is_tie": len(winners) > 1,
        "top_vote_count": max_votes,
    }


def recount_votes(candidates, voters):
    """Recount every ballot from the voter registry and compare to stored tallies."""
    candidates = list(candidates)
    recounted = {candidate.identity: 0 for candidate in candidates}

    invalid_ballots = []
    voted = 0
    for voter in voters:
        if not voter.has_voted:
            if voter.voted_for is not None:
                invalid_ballots.append(voter.identity)
            continue
        voted += 1
        if voter.voted_for not in recounted:
            invalid_ballots.append(voter.identity)
            continue
        recounted[voter.voted_for] += 1

    discrepancies = []
    for candidate in candidates:
        expected = recounted[candidate.identity]
        if candidate.vote_count != expected:
            discrepancies.append(
                {
                    "candidate": candidate.identity,
                    "recorded": candidate.vote_count,
                    "recounted": expected,
                }
            )

    recorded_total = sum(candidate.vote_count for candidate in candidates)
    return {
        "recorded_total": recorded_total,
        "voters_voted": voted,
        "invariant_holds": recorded_total == voted,
        "discrepancies": discrepancies,
        "invalid_ballots": invalid_ballots,
        "ok": recorded_total == voted and not discrepancies and not invalid_ballots,
    }


def serialize_tally(result):
    return {
        "total_votes": result["total_votes"],
        "results": [
            {
                "candidate": row["candidate"].to_dict(),
                "count": row["count"],
                "percent": round(row["percent"], 2),
            }
            for row in result["candidate_results"]
        ],
        "winner": result["winner"].identity if result["winner"] else None,
        "winners": [candidate.identity for candidate in result["winners"]],
        "is_tie": result["is_tie"],
        "top_vote_count": result["top_vote_count"],
    }
