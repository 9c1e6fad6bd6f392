"""FastAPI application for Bitcoin Influencer Match."""

from datetime import datetime
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel

from .. import __version__
from ..categorizer import FALLBACK_CATEGORY, Category, Categorizer, build_openai_client
from ..matching import MatchRecorder, MatchViewer, render_creator
from ..storage.database import Database, PersistenceError
from ..utils.config import Config, get_config, get_settings


class CategorizeRequest(BaseModel):
    productDescription: Optional[str] = None


class SaveMatchRequest(BaseModel):
    userId: Optional[str] = None
    creatorIds: Optional[List[str]] = None
    category: Optional[str] = None


class OnboardingRequest(BaseModel):
    userId: str
    companyName: str
    productName: str
    productUrl: Optional[str] = None
    productDescription: str


# ============================================================================
# Dependencies
# ============================================================================


def get_app_config(request: Request) -> Config:
    return request.app.state.config


def get_database(request: Request) -> Database:
    return request.app.state.db


def get_categorizer(request: Request) -> Categorizer:
    return request.app.state.categorizer


def get_recorder(db: Database = Depends(get_database)) -> MatchRecorder:
    return MatchRecorder(db)


def get_viewer(
    db: Database = Depends(get_database), config: Config = Depends(get_app_config)
) -> MatchViewer:
    return MatchViewer(db, fallback_limit=config.matching.default_limit)


def _describe_validation_errors(errors: list) -> str:
    parts = []
    for error in errors:
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request"


# ============================================================================
# Application
# ============================================================================


def create_app(
    config: Optional[Config] = None,
    database: Optional[Database] = None,
    categorizer: Optional[Categorizer] = None,
) -> FastAPI:
    """Build the API with its collaborators constructed once and shared by every request.

    Args:
        config: Application configuration, loaded from file/env when omitted
        database: Database instance, created from ``config.database`` when omitted
        categorizer: Categorizer, backed by an OpenAI client when omitted

    Returns:
        Configured FastAPI application
    """
    config = config or get_config()

    if database is None:
        database = Database(config.database.url, echo=config.database.echo)

    if categorizer is None:
        client = build_openai_client(get_settings(), config.openai)
        categorizer = Categorizer(client, config.openai)

    app = FastAPI(
        title="Bitcoin Influencer Match API",
        description="Match brands with Bitcoin content creators",
        version=__version__,
    )
    app.state.config = config
    app.state.db = database
    app.state.categorizer = categorizer

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"detail": _describe_validation_errors(exc.errors())},
        )

    @app.on_event("startup")
    async def startup_event():
        """Run on application startup."""
        logger.info("Bitcoin Influencer Match API starting up")

    @app.on_event("shutdown")
    async def shutdown_event():
        """Run on application shutdown."""
        logger.info("Bitcoin Influencer Match API shutting down")

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": "Bitcoin Influencer Match API",
            "version": __version__,
            "status": "running",
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "timestamp": datetime.utcnow().isoformat(),
        }

    @app.get("/api/categories")
    async def list_categories():
        """List the category vocabulary."""
        return {"categories": Category.values(), "fallback": FALLBACK_CATEGORY.value}

    @app.post("/api/categorize-product")
    def categorize_product(
        payload: CategorizeRequest,
        categorizer: Categorizer = Depends(get_categorizer),
    ):
        """Assign a category to a product description.

        Provider or configuration failures still return the fallback
        category, with a 500 status so the degradation is visible.
        """
        description = (payload.productDescription or "").strip()
        if not description:
            raise HTTPException(status_code=400, detail="Product description is required")

        result = categorizer.categorize(description)

        if result.reason in ("not_configured", "provider_error"):
            return JSONResponse(
                status_code=500,
                content={
                    "detail": "Failed to categorize product",
                    "category": result.category.value,
                    "reason": result.reason,
                },
            )

        return {"category": result.category.value}

    @app.post("/api/save-match")
    def save_match(
        payload: SaveMatchRequest,
        recorder: MatchRecorder = Depends(get_recorder),
    ):
        """Create or update the user's match for a category."""
        if not payload.userId or payload.creatorIds is None:
            raise HTTPException(
                status_code=400, detail="Missing required fields: userId, creatorIds"
            )

        try:
            result = recorder.record_match(payload.userId, payload.creatorIds, payload.category)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except PersistenceError as e:
            logger.error(
                f"Error saving match for user {payload.userId} "
                f"({len(payload.creatorIds)} creators): {e}"
            )
            raise HTTPException(status_code=500, detail="Failed to save match")

        return {
            "success": True,
            "action": result.action,
            "data": result.record.to_api(),
        }

    @app.get("/api/user-matches")
    def user_matches(
        userId: Optional[str] = Query(None, description="User identifier"),
        viewer: MatchViewer = Depends(get_viewer),
    ):
        """Get the user's most recent match, or null when there is none."""
        if not userId:
            raise HTTPException(status_code=400, detail="User ID is required")

        try:
            match = viewer.get_latest_match(userId)
        except PersistenceError as e:
            logger.error(f"Error fetching user matches for {userId}: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch user matches")

        return {"userMatches": match.to_api() if match else None}

    @app.get("/api/creators")
    def list_creators(
        category: Optional[str] = Query(None, description="Filter by category"),
        limit: int = Query(20, ge=1, description="Number of results"),
        viewer: MatchViewer = Depends(get_viewer),
        config: Config = Depends(get_app_config),
    ):
        """List creators by descending total followers."""
        if limit > config.matching.max_limit:
            raise HTTPException(
                status_code=400,
                detail=f"limit must be at most {config.matching.max_limit}",
            )

        parsed = None
        if category:
            parsed = Category.parse(category)
            if parsed is None:
                raise HTTPException(status_code=400, detail=f"Unknown category: {category}")

        try:
            creators = viewer.list_creators_by_category(
                parsed.value if parsed else None, limit=limit
            )
        except PersistenceError as e:
            logger.error(f"Error listing creators (category={category}): {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch creators")

        return {
            "creators": [render_creator(c) for c in creators],
            "total": len(creators),
            "category": parsed.value if parsed else None,
        }

    @app.get("/api/dashboard")
    def dashboard(
        userId: Optional[str] = Query(None, description="User identifier"),
        viewer: MatchViewer = Depends(get_viewer),
    ):
        """Match page content for a user."""
        return viewer.load(userId).to_dict()

    @app.post("/api/onboarding")
    def complete_onboarding(
        payload: OnboardingRequest,
        db: Database = Depends(get_database),
        categorizer: Categorizer = Depends(get_categorizer),
        recorder: MatchRecorder = Depends(get_recorder),
        viewer: MatchViewer = Depends(get_viewer),
        config: Config = Depends(get_app_config),
    ):
        """Store onboarding answers, categorize the product and match creators.

        Only invalid input fails this endpoint. Backend failures degrade the
        result (fallback category, empty creator list, no saved match).
        """
        user_id = payload.userId.strip()
        description = payload.productDescription.strip()
        max_length = config.matching.max_description_length

        if not user_id:
            raise HTTPException(status_code=400, detail="User ID is required")
        if not payload.companyName.strip() or not payload.productName.strip():
            raise HTTPException(status_code=400, detail="Company name and product name are required")
        if not description:
            raise HTTPException(status_code=400, detail="Product description is required")
        if len(description) > max_length:
            raise HTTPException(
                status_code=400,
                detail=f"Product description must be at most {max_length} characters",
            )

        result = categorizer.categorize(description)
        category = result.category.value

        onboarding_id = None
        try:
            onboarding_id = db.record_onboarding_answer(
                user_id=user_id,
                company_name=payload.companyName.strip(),
                product_name=payload.productName.strip(),
                product_url=(payload.productUrl or "").strip() or None,
                product_description=description,
                category=category,
            )
        except PersistenceError as e:
            logger.error(f"Error recording onboarding answer for user {user_id}: {e}")

        try:
            creators = viewer.list_creators_by_category(
                category, limit=config.matching.default_limit
            )
        except PersistenceError as e:
            logger.error(f"Error listing creators for category {category}: {e}")
            creators = []

        match = None
        try:
            match = recorder.record_match(user_id, [c.id for c in creators], category).record
        except PersistenceError as e:
            logger.error(
                f"Error saving match for user {user_id} ({len(creators)} creators): {e}"
            )

        return {
            "onboardingId": onboarding_id,
            "category": category,
            "degraded": result.degraded,
            "reason": result.reason,
            "creators": [render_creator(c) for c in creators],
            "match": match.to_api() if match else None,
        }

    return app
