from fastapi import FastAPI, APIRouter, UploadFile, File, Form, HTTPException
from fastapi.responses import FileResponse
from dotenv import load_dotenv
from starlette.middleware.cors import CORSMiddleware
from motor.motor_asyncio import AsyncIOMotorClient
import os
import logging
from pathlib import Path
from typing import List, Optional

from article_intake.blobs import BlobStorage
from article_intake.config import load_settings
from article_intake.doi import DoiResolver
from article_intake.errors import BlobNotFound, DoiNotFound, NotFound, ValidationError
from article_intake.extract import TextExtractor
from article_intake.ingest import IngestionCoordinator
from article_intake.logging_setup import setup_logging
from article_intake.models import (
    Article,
    ArticleFields,
    DeleteResponse,
    DoiLookupRequest,
    DoiLookupResponse,
    ExtractSummaryResponse,
    Upload,
)
from article_intake.store import ArticleRecordStore, MemoryRecords, MongoRecords
from article_intake.summarize import Summarizer

ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')

settings = load_settings(os.environ.get('ARTICLES_CONFIG'))
setup_logging(Path(settings.logging.log_dir), settings.logging.level)
logger = logging.getLogger("article_intake.api")

# MongoDB connection (optional; app falls back to in-memory storage)
client = AsyncIOMotorClient(
    settings.storage.mongo_url,
    serverSelectionTimeoutMS=settings.storage.server_selection_timeout_ms,
)
db = client[settings.storage.db_name]

summarizer = Summarizer(settings.summarizer)
store = ArticleRecordStore(MemoryRecords(), BlobStorage(Path(settings.storage.upload_dir)))
coordinator = IngestionCoordinator(
    extractor=TextExtractor(),
    summarizer=summarizer,
    resolver=DoiResolver(settings.doi, summarizer),
    store=store,
)

# Create the main app without a prefix
app = FastAPI()

# Create a router with the /api prefix
api_router = APIRouter(prefix="/api")


async def _init_db_connection() -> None:
    """Initialize DB connectivity. If Mongo isn't reachable, keep running with memory storage."""
    try:
        await client.admin.command("ping")
        store.records = MongoRecords(db[settings.storage.collection])
        logger.info("MongoDB connected")
    except Exception as e:
        logger.warning(f"MongoDB not reachable; using in-memory article store. Details: {e}")


async def _read_upload(file: Optional[UploadFile]) -> Optional[Upload]:
    if file is None or not file.filename:
        return None
    return Upload(filename=file.filename, data=await file.read())


# Routes
@api_router.get("/")
async def root():
    return {"message": "Research Article Manager API"}


@api_router.get("/articles", response_model=List[Article])
async def list_articles(search: Optional[str] = None):
    """List articles, optionally filtered by a title substring"""
    return await coordinator.store.list_articles(search)


@api_router.post("/articles", response_model=Article)
async def create_article(
    title: str = Form(""),
    author: Optional[str] = Form(None),
    summary: Optional[str] = Form(None),
    notes: Optional[str] = Form(None),
    doi: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
):
    """Create an article; an attached document fills in a missing summary"""
    fields = ArticleFields(title=title, author=author, summary=summary, notes=notes, doi=doi)
    try:
        return await coordinator.create_article(fields, await _read_upload(file))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@api_router.post("/articles/fetch-doi", response_model=DoiLookupResponse)
async def fetch_doi(request: DoiLookupRequest):
    """Look up title, authors and abstract for a DOI"""
    try:
        meta = await coordinator.fetch_doi(request.doi)
    except DoiNotFound as e:
        logger.warning("DOI lookup failed: %s", e)
        raise HTTPException(status_code=400, detail="Could not retrieve DOI metadata")
    return DoiLookupResponse(title=meta.title, authors=meta.authors, summary=meta.abstract, doi=meta.doi)


@api_router.post("/articles/extract-summary", response_model=ExtractSummaryResponse)
async def extract_summary(file: Optional[UploadFile] = File(None)):
    """Summarize an uploaded document without creating an article"""
    upload = await _read_upload(file)
    if upload is None:
        raise HTTPException(status_code=400, detail="No file uploaded")

    summary = await coordinator.extract_summary(upload)
    if not summary:
        return ExtractSummaryResponse(summary="", detail="Text could not be extracted.")
    return ExtractSummaryResponse(summary=summary)


@api_router.get("/articles/download/{ref}")
async def download(ref: str):
    try:
        path = coordinator.blobs.path(ref)
    except BlobNotFound:
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(path, filename=ref)


@api_router.delete("/articles/{article_id}", response_model=DeleteResponse)
async def delete_article(article_id: str):
    try:
        await coordinator.delete_article(article_id)
    except NotFound:
        raise HTTPException(status_code=404, detail="Article not found")
    return DeleteResponse(success=True)


# Include the router in the main app
app.include_router(api_router)

app.add_middleware(
    CORSMiddleware,
    allow_credentials=True,
    allow_origins=os.environ.get('CORS_ORIGINS', '*').split(','),
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_db_client():
    await _init_db_connection()


@app.on_event("shutdown")
async def shutdown_db_client():
    client.close()
