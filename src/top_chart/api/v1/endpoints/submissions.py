# src/top_chart/api/v1/endpoints/submissions.py
"""Public song submission endpoint."""

from fastapi import APIRouter, HTTPException, status

from top_chart.api.v1.dependencies import CaptchaVerifierDep, SessionDep
from top_chart.schemas import SongSubmission, SubmissionResponse
from top_chart.services.moderation import ModerationService

router = APIRouter(prefix="/submissions", tags=["submissions"])


@router.post("", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
async def submit_song(
    submission: SongSubmission,
    db: SessionDep,
    captcha: CaptchaVerifierDep,
) -> SubmissionResponse:
    """Suggest a song; it stays pending until a moderator approves it."""
    if not await captcha.verify(submission.captcha_token):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="captcha_failed",
        )

    song = ModerationService.submit(db, submission)
    return SubmissionResponse(song_id=song.id)
