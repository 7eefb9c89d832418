"""
FastAPI Main Application
Backend server for timed technical interview practice.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, File, HTTPException, Query, UploadFile, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from interview_coach import __version__
from interview_coach.config import Settings
from interview_coach.core.engine import AnswerResolutionEngine, ResolutionState
from interview_coach.core.exceptions import (
    CandidateValidationError,
    InvalidSessionError,
    SessionNotFoundError,
)
from interview_coach.core.models import (
    CandidateListResponse,
    CandidateSummary,
    CompleteInterviewRequest,
    CompleteInterviewResponse,
    ErrorResponse,
    InterviewSession,
    ReferenceAnswerRequest,
    ReferenceAnswerResponse,
    SessionStatusResponse,
    SortOrder,
    StartInterviewRequest,
    StartInterviewResponse,
    SubmitAnswerRequest,
    SubmitAnswerResponse,
    UploadResumeResponse,
)
from interview_coach.services.interview_service import InterviewService
from interview_coach.services.reference_answer import ReferenceAnswerGenerator
from interview_coach.services.resume_extractor import DocumentProcessingError, extract_candidate_info
from interview_coach.services.scoring import create_chat_model, create_scorer
from interview_coach.services.session_store import create_session_store
from interview_coach.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


# Global state
settings: Optional[Settings] = None
interview_service: Optional[InterviewService] = None
reference_generator: Optional[ReferenceAnswerGenerator] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    # Startup
    global settings, interview_service, reference_generator
    try:
        settings = Settings()
        setup_logging(level=settings.log_level, json_format=settings.log_format.lower() == "json")
        logger.info("Settings loaded successfully")

        store = create_session_store(settings.session_store_dir)
        scorer = create_scorer(settings)
        interview_service = InterviewService(store, scorer)
        interview_service.rehydrate_ledger()
        logger.info(f"✓ Interview service initialized (scoring backend: {scorer.name})")

        reference_generator = ReferenceAnswerGenerator(create_chat_model(settings))
        logger.info("✓ Reference answer generator initialized")

    except Exception as e:
        logger.error(f"Failed to initialize application: {str(e)}")
        raise

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if interview_service:
        interview_service.shutdown()
    interview_service = None
    reference_generator = None
    settings = None
    logger.info("Application shutdown complete")


# Initialize FastAPI app
app = FastAPI(
    title="Interview Coach API",
    description="Timed technical interview practice with per-answer scoring and a ranked candidate list",
    version=__version__,
    lifespan=lifespan
)

# Configure CORS (CORS_ALLOW_ORIGINS, all origins by default)
app.add_middleware(
    CORSMiddleware,
    allow_origins=Settings().cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_interview_service() -> InterviewService:
    if interview_service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Interview service not initialized"
        )
    return interview_service


def get_reference_generator() -> ReferenceAnswerGenerator:
    if reference_generator is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Reference answer generator not initialized"
        )
    return reference_generator


def _time_remaining(engine: AnswerResolutionEngine) -> Optional[int]:
    if engine.state == ResolutionState.WAITING_FOR_ANSWER:
        return engine.remaining_seconds
    return None


def _candidate_summary(session: InterviewSession) -> CandidateSummary:
    return CandidateSummary(
        session_id=session.session_id,
        name=session.candidate.name,
        email=session.candidate.email,
        phone=session.candidate.phone,
        final_score=session.final_score,
        summary=session.summary,
        completed_at=session.completed_at,
    )


@app.get("/")
async def root():
    """Root endpoint - simple API info."""
    return {
        "message": "Interview Coach API",
        "status": "operational",
        "version": __version__
    }


@app.get("/health")
async def health_check():
    """
    Detailed health check endpoint.

    Returns:
        Health status with component checks
    """
    health_status = {
        "status": "healthy",
        "version": __version__,
        "timestamp": time.time(),
        "components": {
            "interview_service": interview_service is not None,
            "reference_generator": reference_generator is not None,
        },
        "scoring_backend": interview_service.scorer.name if interview_service else None,
        "metrics": {
            "active_sessions": len([
                engine for engine in interview_service.engines.values()
                if engine.state not in (ResolutionState.FINISHED, ResolutionState.ABANDONED)
            ]) if interview_service else 0,
            "completed_sessions": len(interview_service.ledger) if interview_service else 0,
        }
    }

    if not all(health_status["components"].values()):
        health_status["status"] = "degraded"
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=health_status
        )

    return health_status


@app.get("/metrics")
async def metrics():
    """
    Prometheus-compatible metrics endpoint.

    Returns:
        Text-formatted Prometheus metrics
    """
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


@app.post(
    "/api/upload-resume",
    response_model=UploadResumeResponse,
    status_code=status.HTTP_200_OK,
    responses={400: {"model": ErrorResponse}}
)
async def upload_resume(resume: UploadFile = File(..., description="Resume file (PDF or DOCX)")):
    """
    Scrape name, email and phone from a resume.

    Fields that could not be found are listed in missing_fields so the
    client can ask the candidate for them before starting.
    """
    logger.info(f"Received resume upload: {resume.filename} ({resume.content_type})")

    content = await resume.read()
    try:
        extracted = extract_candidate_info(content, resume.content_type, resume.filename or "")
    except DocumentProcessingError as e:
        logger.error(f"Document processing error: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Document processing failed: {str(e)}"
        )

    missing = extracted.missing_fields
    if missing:
        message = f"Please provide: {', '.join(missing)}"
    else:
        message = "All candidate details found"

    return UploadResumeResponse(candidate_info=extracted, missing_fields=missing, message=message)


@app.post(
    "/api/start-interview",
    response_model=StartInterviewResponse,
    status_code=status.HTTP_200_OK,
    responses={400: {"model": ErrorResponse}}
)
async def start_interview(
    request: StartInterviewRequest,
    service: InterviewService = Depends(get_interview_service),
):
    """
    Start a session for a fully identified candidate and return the first question.

    The first question's countdown is already running when this returns.
    """
    try:
        engine = service.start_session(request.candidate_info)
    except CandidateValidationError as e:
        logger.warning(f"Rejected start-interview: {str(e)}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    session = engine.session
    return StartInterviewResponse(
        session_id=session.session_id,
        questions=session.questions,
        current_question=engine.current_question,
        time_remaining_seconds=engine.remaining_seconds,
        message=f"Interview started for {session.candidate.name}"
    )


@app.post(
    "/api/submit-answer",
    response_model=SubmitAnswerResponse,
    status_code=status.HTTP_200_OK,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}}
)
async def submit_answer(
    request: SubmitAnswerRequest,
    service: InterviewService = Depends(get_interview_service),
):
    """
    Submit the answer to the current question.

    Returns 409 when the question was already resolved (for example by the
    timer) or is not the session's current question.
    """
    try:
        engine = service.get_engine(request.session_id)
        outcome = await engine.submit(request.question_id, request.answer)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except CandidateValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if outcome is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Question {request.question_id} is not awaiting an answer"
        )

    session = engine.session
    return SubmitAnswerResponse(
        session_id=session.session_id,
        question_id=outcome.question_id,
        score=outcome.score,
        feedback=outcome.feedback,
        scored_by=outcome.scored_by,
        next_question=engine.current_question,
        time_remaining_seconds=_time_remaining(engine),
        is_complete=engine.is_finished,
        final_score=session.final_score,
        summary=session.summary,
    )


@app.get("/api/sessions/{session_id}", response_model=SessionStatusResponse)
async def get_session(session_id: str, service: InterviewService = Depends(get_interview_service)):
    """Session snapshot used by the client to resume after a page reload."""
    try:
        engine = service.get_engine(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return SessionStatusResponse(
        session=engine.session,
        engine_state=engine.state.value,
        time_remaining_seconds=_time_remaining(engine),
    )


@app.post("/api/sessions/{session_id}/abandon")
async def abandon_session(session_id: str, service: InterviewService = Depends(get_interview_service)):
    try:
        abandoned = service.abandon(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return {"session_id": session_id, "abandoned": abandoned}


@app.post(
    "/api/complete-interview",
    response_model=CompleteInterviewResponse,
    status_code=status.HTTP_200_OK,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}}
)
async def complete_interview(
    request: CompleteInterviewRequest,
    service: InterviewService = Depends(get_interview_service),
):
    """
    Final score and summary of a finished session.

    Idempotent: repeated calls return the same frozen result.
    """
    try:
        session = service.complete_session(request.session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidSessionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return CompleteInterviewResponse(
        session_id=session.session_id,
        final_score=session.final_score,
        summary=session.summary,
        outcomes=session.outcomes,
    )


@app.get("/api/candidates", response_model=CandidateListResponse)
async def list_candidates(
    sort: SortOrder = Query(SortOrder.SCORE_DESC, description="score_desc or score_asc"),
    search: Optional[str] = Query(None, description="Case-insensitive match on name or email"),
    service: InterviewService = Depends(get_interview_service),
):
    sessions = service.list_candidates(sort_order=sort, search_text=search)
    return CandidateListResponse(
        candidates=[_candidate_summary(session) for session in sessions],
        total=len(sessions),
    )


@app.get("/api/candidates/{session_id}", response_model=InterviewSession)
async def get_candidate(session_id: str, service: InterviewService = Depends(get_interview_service)):
    try:
        return service.get_candidate(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@app.get("/api/candidates/{session_id}/history", response_model=CandidateListResponse)
async def candidate_history(session_id: str, service: InterviewService = Depends(get_interview_service)):
    """Other completed attempts by the same email, oldest first."""
    try:
        attempts: List[InterviewSession] = service.history(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return CandidateListResponse(
        candidates=[_candidate_summary(session) for session in attempts],
        total=len(attempts),
    )


@app.post("/api/generate-llm-answer", response_model=ReferenceAnswerResponse)
async def generate_llm_answer(
    request: ReferenceAnswerRequest,
    generator: ReferenceAnswerGenerator = Depends(get_reference_generator),
):
    answer, generated_by = await generator.generate(request.question)
    return ReferenceAnswerResponse(
        question_id=request.question.id,
        answer=answer,
        generated_by=generated_by,
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    """Custom exception handler for HTTP exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail, "detail": str(exc.detail)}
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """Custom exception handler for unexpected exceptions."""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "detail": str(exc)}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
