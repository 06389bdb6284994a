# src/top_chart/api/v1/endpoints/votes.py
"""Vote-related endpoints for the Top Chart API."""

from fastapi import APIRouter, HTTPException, status

from top_chart.api.v1.dependencies import ClientIdentityDep, SessionDep, VotingServiceDep
from top_chart.schemas import VoteCreate, VoteResponse
from top_chart.services.voting import VoteResult

router = APIRouter(prefix="/votes", tags=["votes"])

_REJECTIONS = {
    VoteResult.ALREADY_VOTED: (status.HTTP_409_CONFLICT, "already_voted"),
    VoteResult.NOT_ELIGIBLE: (status.HTTP_404_NOT_FOUND, "song_not_found"),
    VoteResult.FAILED: (status.HTTP_503_SERVICE_UNAVAILABLE, "vote_failed"),
}


# Plain ``def``: the ledger blocks on storage, so each vote runs in the threadpool.
@router.post("", response_model=VoteResponse)
def cast_vote(
    vote_data: VoteCreate,
    db: SessionDep,
    voting: VotingServiceDep,
    identity: ClientIdentityDep,
) -> VoteResponse:
    """Cast one vote for an approved song; each voter may vote once per song."""
    address, user_agent = identity
    outcome = voting.cast_vote(db, vote_data.song_id, address=address, user_agent=user_agent)

    if outcome.result in _REJECTIONS:
        status_code, detail = _REJECTIONS[outcome.result]
        raise HTTPException(status_code=status_code, detail=detail)

    return VoteResponse(song_id=outcome.song_id, votes=outcome.votes or 0)
