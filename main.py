from fastapi import FastAPI, HTTPException, Path
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.middleware.cors import CORSMiddleware
import asyncio
import logging
import time
import uvicorn
from typing import List, Optional
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from datetime import datetime

from config import settings
from models import (
    DecodeStatus, DecodeRequest, DecodeResponse, BatchDecodeRequest, BatchDecodeResponse,
    LayoutInfo, ErrorResponse
)
from frame_decoder import decode, outcome_message
from field_dispatcher import find_layout, layout_info, parse_key, supported_layouts


# Configure logging
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
        logging.FileHandler(settings.log_file, mode='a')
    ]
)

# Set logger levels for different components
logging.getLogger("FrameDecoderAPI").setLevel(logging.INFO)
logging.getLogger("FrameDecoderStartup").setLevel(logging.INFO)
logging.getLogger("FrameDecoder").setLevel(settings.log_level)
logging.getLogger("SecurityUnitProtocol").setLevel(settings.log_level)
logging.getLogger("FieldDispatcher").setLevel(settings.log_level)
logging.getLogger("uvicorn").setLevel(logging.INFO)

logger = logging.getLogger("FrameDecoderAPI")
startup_logger = logging.getLogger("FrameDecoderStartup")

MANAGED_LOGGERS = ["FrameDecoderAPI", "FrameDecoder", "SecurityUnitProtocol", "FieldDispatcher", "uvicorn"]

# Worker pool for batch decoding
executor: Optional[ThreadPoolExecutor] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle"""
    global executor

    # Startup
    startup_logger.info("=== Starting Security Unit Frame Decoder ===")
    startup_logger.info(f"Startup time: {datetime.now()}")
    startup_logger.info(f"Configuration: {settings.model_dump()}")

    executor = ThreadPoolExecutor(max_workers=settings.batch_workers, thread_name_prefix="FrameDecoderWorker")
    startup_logger.info(f"Batch decoder pool started with {settings.batch_workers} workers")
    startup_logger.info(f"{len(supported_layouts())} data-domain layouts registered")

    startup_logger.info("System startup complete - API ready to serve requests")
    startup_logger.info(f"Swagger UI: http://localhost:{settings.port}/docs")

    yield

    # Shutdown
    startup_logger.info("=== Shutting down Security Unit Frame Decoder ===")
    if executor:
        executor.shutdown(wait=True)
        executor = None
    startup_logger.info("System shutdown complete")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Decodes security unit command and acknowledgement frames into labelled fields",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _check_frame_size(frame: str):
    if len(frame) > settings.max_frame_chars:
        raise HTTPException(
            status_code=422,
            detail=f"Frame exceeds {settings.max_frame_chars} characters"
        )


def _decode_to_response(frame: str) -> DecodeResponse:
    outcome = decode(frame)
    fields = outcome.fields or []
    return DecodeResponse(
        status=outcome.status,
        message=outcome_message(outcome.status),
        field_count=len(fields),
        fields=fields,
        timestamp=datetime.now()
    )


@app.get("/", include_in_schema=False)
async def root():
    """Redirect to API documentation"""
    return RedirectResponse(url="/docs")


@app.get("/api/health",
         summary="Health Check",
         description="Check if the API is running and healthy")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": "1.0.0",
        "layouts_registered": len(supported_layouts())
    }


@app.post("/api/frames/decode",
          response_model=DecodeResponse,
          summary="Decode Frame",
          description="Validate and decode a single security unit frame")
async def decode_frame(request: DecodeRequest):
    """
    Decode one frame given as hex text.

    Whitespace and letter case are ignored. A frame that fails validation is
    still a 200 response; its status tells which check failed:
    - BYTE_INCOMPLETE: empty or odd number of hex digits
    - FORMAT_INCOMPLETE: bad characters, markers, length field or codes
    - CHECKSUM_FAILED: checksum byte does not match
    """
    _check_frame_size(request.frame)

    response = _decode_to_response(request.frame)
    logger.info(f"Decoded frame: {response.status.value} ({response.field_count} fields)")
    return response


@app.post("/api/frames/decode/batch",
          response_model=BatchDecodeResponse,
          summary="Decode Frames",
          description="Decode several frames concurrently; results keep the request order")
async def decode_frames(request: BatchDecodeRequest):
    """Decode a batch of frames on the decoder worker pool"""
    if not executor:
        raise HTTPException(status_code=500, detail="Decoder pool not initialized")

    if not request.frames:
        raise HTTPException(status_code=400, detail="No frames supplied")
    if len(request.frames) > settings.max_batch_size:
        raise HTTPException(
            status_code=400,
            detail=f"Batch of {len(request.frames)} frames exceeds the limit of {settings.max_batch_size}"
        )
    for frame in request.frames:
        _check_frame_size(frame)

    start_time = time.time()
    futures = [executor.submit(_decode_to_response, frame) for frame in request.frames]
    results = await asyncio.gather(*(asyncio.wrap_future(future) for future in futures))
    duration = time.time() - start_time

    complete = sum(1 for result in results if result.status == DecodeStatus.PARSE_COMPLETE)
    logger.info(f"Decoded batch of {len(results)} frames, {complete} complete, in {duration:.3f}s")

    return BatchDecodeResponse(
        results=results,
        total=len(results),
        complete=complete,
        duration=duration,
        timestamp=datetime.now()
    )


@app.get("/api/layouts",
         response_model=List[LayoutInfo],
         summary="Get All Layouts",
         description="List every (F, C/A) combination with a data-domain layout")
async def get_layouts():
    """Registered data-domain layouts in key order"""
    return supported_layouts()


@app.get("/api/layouts/{key}",
         response_model=LayoutInfo,
         summary="Get Layout",
         description="Get one data-domain layout by its 4-digit hex key, e.g. 0204")
async def get_layout(
    key: str = Path(..., description="Layout key: F then C/A as 4 hex digits")
):
    """Get a specific layout by key"""
    parsed = parse_key(key)
    if parsed is None or find_layout(parsed) is None:
        raise HTTPException(status_code=404, detail=f"Layout {key} not found")

    return layout_info(parsed)


# Debug Endpoints
@app.get("/debug/logging", tags=["Debug"])
async def get_logging_config():
    """Get current logging configuration"""
    return {
        "loggers": {
            name: logging.getLevelName(logging.getLogger(name).level) for name in MANAGED_LOGGERS
        },
        "log_file": settings.log_file,
        "timestamp": datetime.now()
    }


@app.post("/debug/logging/{logger_name}/{level}", tags=["Debug"])
async def set_logging_level(
    logger_name: str = Path(..., description="Logger name (e.g., FrameDecoder, FieldDispatcher)"),
    level: str = Path(..., description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)")
):
    """Set logging level for specific logger at runtime"""
    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL
    }

    if level.upper() not in level_map:
        raise HTTPException(status_code=400, detail=f"Invalid level: {level}")

    target_logger = logging.getLogger(logger_name)
    old_level = target_logger.level
    target_logger.setLevel(level_map[level.upper()])

    logger.info(f"Changed {logger_name} log level from {old_level} to {level_map[level.upper()]}")

    return {
        "logger": logger_name,
        "old_level": old_level,
        "new_level": level_map[level.upper()],
        "timestamp": datetime.now()
    }


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler"""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal Server Error",
            message="An unexpected error occurred",
            details={"exception": str(exc)},
            timestamp=datetime.now()
        ).model_dump(mode="json")
    )


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        log_level="info"
    )
