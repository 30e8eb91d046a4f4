import json
from datetime import datetime
from typing import Iterator, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import ValidationError

from resumeiq.factories.service_factory import build_services
from resumeiq.graph.events import AnalysisResult
from resumeiq.graph.graph import PipelineGraph
from resumeiq.graph.stages import calculate_progress, current_group
from resumeiq.spec.loader import load_pipeline_config, load_provider_config
from resumeiq.spec.models import LLMProviderConfig, PdfSource, UrlSource, UserOptions
from resumeiq.utils.logger import JSONLLogger


load_dotenv()

app = FastAPI(title="ResumeIQ")

# Allow CORS for the frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# =====================================================================
# GLOBAL VARIABLES
# =====================================================================

TEST_NAME = f"web_request_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
LOG_PATH = f"logs/server_log_{TEST_NAME}.jsonl"

# Built lazily so importing the app never touches the filesystem or the network
_pipeline: Optional[PipelineGraph] = None


def get_pipeline() -> PipelineGraph:
    global _pipeline
    if _pipeline is None:
        config = load_pipeline_config()
        logger = JSONLLogger(log_path=config.log_path or LOG_PATH)
        _pipeline = PipelineGraph(build_services(config=config, logger=logger))
    return _pipeline


# =====================================================================
# REQUEST HELPERS
# =====================================================================

def format_sse_event(event) -> str:
    return f"event: {event.kind}\ndata: {event.model_dump_json()}\n\n"


async def read_upload(upload: Optional[UploadFile]) -> Optional[bytes]:
    if upload is None:
        return None
    data = await upload.read()
    return data or None


def build_options(resume_format: str, target_ats: str, region: str, cover_letter_length: str) -> UserOptions:
    try:
        return UserOptions(
            resume_format=resume_format,
            target_ats=target_ats,
            region=region,
            cover_letter_length=cover_letter_length,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=json.loads(e.json(include_url=False)))


def build_provider(base_url: Optional[str], api_key: Optional[str], model_name: Optional[str]) -> LLMProviderConfig:
    """Request-supplied provider settings override the environment."""
    provider = load_provider_config()
    overrides = {k: v for k, v in {"base_url": base_url, "api_key": api_key, "model_name": model_name}.items() if v}
    if not overrides:
        return provider
    return LLMProviderConfig(**{**provider.model_dump(), **overrides})


async def collect_inputs(resume, jd_url, jd_pdf, cover_letter):
    resume_bytes = await read_upload(resume)
    if not resume_bytes:
        raise HTTPException(status_code=400, detail="Resume PDF is required")

    jd_bytes = await read_upload(jd_pdf)
    if jd_url:
        try:
            jd_source = UrlSource(value=jd_url)
        except ValidationError:
            raise HTTPException(status_code=400, detail="Job description URL must start with http:// or https://")
    elif jd_bytes:
        jd_source = PdfSource(data=jd_bytes)
    else:
        raise HTTPException(status_code=400, detail="Job description URL or PDF is required")

    return resume_bytes, jd_source, await read_upload(cover_letter)


# =====================================================================
# API ROUTES
# =====================================================================

@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/analyze")
async def analyze(
    resume: Optional[UploadFile] = File(None),
    jd_url: Optional[str] = Form(None),
    jd_pdf: Optional[UploadFile] = File(None),
    cover_letter: Optional[UploadFile] = File(None),
    resume_format: str = Form("chronological"),
    target_ats: str = Form("generic"),
    region: str = Form("us"),
    cover_letter_length: str = Form("medium"),
    llm_base_url: Optional[str] = Form(None),
    llm_api_key: Optional[str] = Form(None),
    llm_model_name: Optional[str] = Form(None),
    pipeline: PipelineGraph = Depends(get_pipeline),
):
    """Stream progress as server-sent events, ending with one complete or error event."""
    resume_bytes, jd_source, cover_letter_bytes = await collect_inputs(resume, jd_url, jd_pdf, cover_letter)
    options = build_options(resume_format, target_ats, region, cover_letter_length)
    provider = build_provider(llm_base_url, llm_api_key, llm_model_name)

    def event_stream() -> Iterator[str]:
        for event in pipeline.stream(
            resume_bytes=resume_bytes,
            jd_source=jd_source,
            options=options,
            llm_config=provider,
            cover_letter_bytes=cover_letter_bytes,
        ):
            yield format_sse_event(event)

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@app.post("/analyze/sync")
async def analyze_sync(
    resume: Optional[UploadFile] = File(None),
    jd_url: Optional[str] = Form(None),
    jd_pdf: Optional[UploadFile] = File(None),
    cover_letter: Optional[UploadFile] = File(None),
    resume_format: str = Form("chronological"),
    target_ats: str = Form("generic"),
    region: str = Form("us"),
    cover_letter_length: str = Form("medium"),
    llm_base_url: Optional[str] = Form(None),
    llm_api_key: Optional[str] = Form(None),
    llm_model_name: Optional[str] = Form(None),
    pipeline: PipelineGraph = Depends(get_pipeline),
):
    """Run the whole pipeline and return the final results in one response."""
    resume_bytes, jd_source, cover_letter_bytes = await collect_inputs(resume, jd_url, jd_pdf, cover_letter)
    options = build_options(resume_format, target_ats, region, cover_letter_length)
    provider = build_provider(llm_base_url, llm_api_key, llm_model_name)

    state = await run_in_threadpool(
        pipeline.run,
        resume_bytes=resume_bytes,
        jd_source=jd_source,
        options=options,
        llm_config=provider,
        cover_letter_bytes=cover_letter_bytes,
    )
    completed = bool(state.get("completed_at"))
    return {
        "success": completed,
        "stage": current_group(state.get("current_node")) if not completed else "complete",
        "percent": calculate_progress(state.get("current_node"), completed=completed),
        "results": AnalysisResult.from_state(state).model_dump(mode="json"),
    }


if __name__ == "__main__":
    import uvicorn

    print("\n" + "="*60)
    print("ResumeIQ API available at: http://localhost:8000")
    print("="*60 + "\n")

    uvicorn.run(app, host="0.0.0.0", port=8000)
