from fastapi import APIRouter

from media_scraper.app.api.routes import scraper

api_router = APIRouter()
api_router.include_router(scraper.router)
# Legacy prefix the editor frontend still calls.
api_router.include_router(scraper.router, prefix="/api/scraper")
