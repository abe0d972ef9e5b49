import datetime as dt
import logging

from dotenv import load_dotenv

load_dotenv(".env.local"); load_dotenv()  # also loads .env if present

from typing import Any, Dict, Optional  # noqa: E402

from fastapi import Body, FastAPI, HTTPException, Query, Response  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from pydantic import BaseModel  # noqa: E402

from wohngeld_prefill import (  # noqa: E402
    FormReadError,
    FormWriteError,
    PrefillError,
    ValidationError,
    WohngeldPrefillService,
    parse_application,
)
from wohngeld_prefill.config import Settings  # noqa: E402
from wohngeld_prefill.samples import sample_application  # noqa: E402

settings = Settings.from_env()


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(settings.log_level)


configure_logging(settings)
logger = logging.getLogger(__name__)

app = FastAPI(title="Wohngeld PDF Service")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:4200",
        "http://127.0.0.1:4200",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "*"
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

prefill_service = WohngeldPrefillService(settings)


def _http_error(exc: PrefillError) -> HTTPException:
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=422, detail={"message": str(exc), "errors": exc.errors})
    if isinstance(exc, FormReadError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, FormWriteError):
        return HTTPException(status_code=500, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


def _ok(message: str, data: Any) -> Dict[str, Any]:
    return {"success": True, "message": message, "data": data}


class TableFillRequest(BaseModel):
    fields: Dict[str, Any]
    name: Optional[str] = None


@app.get("/api/")
def info():
    return {
        "service": "Wohngeld PDF Service",
        "version": "1.0.0",
        "endpoints": {
            "/api/health": "GET - Health Check",
            "/api/data/sample": "GET - Beispiel-Datenstruktur",
            "/api/fields": "GET - Formularfelder der PDF",
            "/api/analyze": "GET/POST - Feldanalyse mit empfohlenem Mapping",
            "/api/fill-pdf": "POST - PDF ausfüllen",
            "/api/fill-pdf/table": "POST - PDF mit Feldtabelle ausfüllen",
            "/api/download/{filename}": "GET - Erstellte PDF herunterladen",
        },
    }


@app.get("/api/health")
def health():
    return {"status": "healthy", "timestamp": dt.datetime.now().isoformat()}


@app.get("/api/data/sample")
def sample_data():
    return sample_application().model_dump()


@app.get("/api/fields")
def form_fields(templatePath: Optional[str] = None):
    try:
        fields = prefill_service.list_fields(templatePath)
    except PrefillError as exc:
        logger.error("Cannot read form fields: %s", exc)
        raise _http_error(exc) from exc
    return _ok(f"Gefundene Felder: {len(fields)}", fields)


@app.get("/api/analyze")
def analyze_template(templatePath: Optional[str] = None):
    try:
        analysis = prefill_service.analyze_template(templatePath)
    except PrefillError as exc:
        logger.error("PDF analysis failed: %s", exc)
        raise _http_error(exc) from exc
    return _ok(f"PDF analysiert: {analysis.total_fields} Felder gefunden", analysis.to_dict())


@app.post("/api/analyze")
def analyze_with_application(payload: Dict[str, Any] = Body(...), templatePath: Optional[str] = None):
    try:
        application = parse_application(payload)
        analysis = prefill_service.analyze_template(templatePath, application=application)
    except PrefillError as exc:
        logger.error("PDF analysis failed: %s", exc)
        raise _http_error(exc) from exc
    return _ok(f"PDF analysiert: {analysis.total_fields} Felder gefunden", analysis.to_dict())


@app.post("/api/fill-pdf")
def fill_pdf(
    payload: Dict[str, Any] = Body(...),
    templatePath: Optional[str] = None,
    strategy: str = Query("direct", pattern="^(direct|classification)$"),
):
    try:
        application = parse_application(payload)
        summary = prefill_service.fill_pdf(application, templatePath, strategy=strategy)
    except PrefillError as exc:
        logger.error("Filling the PDF failed: %s", exc)
        raise _http_error(exc) from exc
    return _ok("PDF erfolgreich erstellt", summary.to_dict())


@app.post("/api/fill-pdf/table")
def fill_pdf_with_table(req: TableFillRequest, templatePath: Optional[str] = None):
    try:
        summary = prefill_service.fill_pdf_with_table(req.fields, templatePath, name=req.name)
    except PrefillError as exc:
        logger.error("Filling the PDF failed: %s", exc)
        raise _http_error(exc) from exc
    return _ok("PDF erfolgreich erstellt", summary.to_dict())


@app.get("/api/download/{filename}")
def download(filename: str):
    """Download a generated PDF by file name"""
    try:
        path = prefill_service.get_output_file(filename)
    except PrefillError as exc:
        raise _http_error(exc) from exc
    headers = {"Content-Disposition": f'attachment; filename="{path.name}"'}
    return Response(content=path.read_bytes(), media_type="application/pdf", headers=headers)
