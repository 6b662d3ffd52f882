import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, File, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.requests import Request
from fastapi.responses import FileResponse, JSONResponse

from log_sentinel import config, conversation, ingestion, llm, models, renderer, session
from log_sentinel.formatting import MarkdownFormatter, MarkdownItFormatter

logger = logging.getLogger(__name__)

INDEX_PAGE = Path(__file__).parent / "static" / "index.html"


@asynccontextmanager
async def lifespan(app: FastAPI):
    cfg = config.get_config()
    app.state.analysis_client = llm.AnalysisClient.from_config(cfg)
    app.state.sessions = session.SessionStore(
        max_sessions=cfg.sessions.max_sessions,
        idle_ttl=cfg.sessions.idle_ttl,
    )
    app.state.formatter = MarkdownItFormatter()
    logger.info(f"Log Sentinel ready (model={cfg.llm.model_name})")
    yield
    await app.state.analysis_client.close()
    logger.info("Log Sentinel stopped")


app = FastAPI(title="Log Sentinel", lifespan=lifespan)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "message": message},
    )


@app.exception_handler(ingestion.IngestionError)
async def ingestion_error_handler(request: Request, exc: ingestion.IngestionError) -> JSONResponse:
    logger.warning(f"Upload rejected: {exc}")
    return _error(400, exc.message)


@app.exception_handler(session.SessionNotFoundError)
async def session_not_found_handler(request: Request, exc: session.SessionNotFoundError) -> JSONResponse:
    return _error(404, exc.message)


@app.exception_handler(session.FileIndexError)
async def file_index_error_handler(request: Request, exc: session.FileIndexError) -> JSONResponse:
    return _error(404, exc.message)


@app.exception_handler(conversation.EmptySubmissionError)
async def empty_submission_handler(request: Request, exc: conversation.EmptySubmissionError) -> JSONResponse:
    return _error(400, str(exc))


@app.exception_handler(conversation.ConversationBusyError)
async def busy_handler(request: Request, exc: conversation.ConversationBusyError) -> JSONResponse:
    return _error(409, str(exc))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = "; ".join(
        f"{'.'.join(str(loc) for loc in e['loc'])}: {e['msg']}" for e in exc.errors()
    )
    return _error(422, messages)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error")
    return _error(500, "Internal server error")


def get_store(request: Request) -> session.SessionStore:
    return request.app.state.sessions


def get_analysis_client(request: Request) -> llm.AnalysisClient:
    return request.app.state.analysis_client


def get_formatter(request: Request) -> MarkdownFormatter:
    return request.app.state.formatter


def get_session(session_id: str, store: session.SessionStore = Depends(get_store)) -> session.Session:
    return store.get(session_id)


def _view(sess: session.Session, formatter: MarkdownFormatter) -> models.SessionView:
    return models.SessionView(
        id=sess.id,
        state=sess.conversation.state.value,
        files=sess.files,
        repo_context=sess.repo_context,
        messages=renderer.render_conversation(sess.conversation, formatter),
    )


@app.get("/", include_in_schema=False)
async def index() -> FileResponse:
    return FileResponse(INDEX_PAGE, media_type="text/html")


@app.post("/sessions", response_model=models.SessionView, status_code=201)
async def create_session(
    store: session.SessionStore = Depends(get_store),
    formatter: MarkdownFormatter = Depends(get_formatter),
) -> models.SessionView:
    return _view(store.create(), formatter)


@app.get("/sessions/{session_id}", response_model=models.SessionView)
async def read_session(
    sess: session.Session = Depends(get_session),
    formatter: MarkdownFormatter = Depends(get_formatter),
) -> models.SessionView:
    return _view(sess, formatter)


@app.delete("/sessions/{session_id}", status_code=204)
async def delete_session(session_id: str, store: session.SessionStore = Depends(get_store)) -> None:
    store.delete(session_id)


@app.post("/sessions/{session_id}/files", response_model=models.LogFile, status_code=201)
async def upload_file(
    file: UploadFile = File(...),
    sess: session.Session = Depends(get_session),
) -> models.LogFile:
    log_file = await ingestion.read_upload(file)
    sess.add_file(log_file)
    return log_file


@app.delete("/sessions/{session_id}/files/{index}", response_model=list[models.LogFile])
async def remove_file(index: int, sess: session.Session = Depends(get_session)) -> list[models.LogFile]:
    removed = sess.remove_file(index)
    logger.info(f"Removed {removed.name} from session {sess.id}")
    return sess.files


@app.get("/sessions/{session_id}/repo-context", response_model=models.RepoContext)
async def read_repo_context(sess: session.Session = Depends(get_session)) -> models.RepoContext:
    return sess.repo_context


@app.put("/sessions/{session_id}/repo-context", response_model=models.RepoContext)
async def replace_repo_context(
    repo_context: models.RepoContext,
    sess: session.Session = Depends(get_session),
) -> models.RepoContext:
    return sess.replace_repo_context(repo_context)


@app.post("/sessions/{session_id}/messages", response_model=models.SessionView)
async def submit_message(
    request: models.SubmitRequest,
    sess: session.Session = Depends(get_session),
    client: llm.AnalysisClient = Depends(get_analysis_client),
    formatter: MarkdownFormatter = Depends(get_formatter),
) -> models.SessionView:
    await sess.conversation.submit(request.text, sess.files, sess.repo_context, client)
    return _view(sess, formatter)
