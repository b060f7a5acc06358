from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Iterator, Optional

import requests
from fastapi import Depends, FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, Response
from fastapi.templating import Jinja2Templates
from loguru import logger

from garage_invoice.config import Settings, get_settings
from garage_invoice.errors import InvoiceError
from garage_invoice.models import InvoiceRequest
from garage_invoice.services import Mailer, generate_invoice
from garage_invoice.utils.log import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    setup_logging(get_settings().log_level)
    yield


app = FastAPI(title="Garage Invoice", lifespan=lifespan)
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


def http_session() -> Iterator[requests.Session]:
    with requests.Session() as session:
        yield session


def get_mailer(settings: Settings = Depends(get_settings)) -> Mailer:
    return Mailer(settings)


def error_response(exc: InvoiceError) -> JSONResponse:
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


def unexpected_error_response(exc: Exception) -> JSONResponse:
    return JSONResponse({"error": str(exc) or "Unknown error"}, status_code=500)


@app.exception_handler(RequestValidationError)
async def request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        problems.append(f"{loc or 'body'}: {err.get('msg')}")
    return JSONResponse({"error": "Validation error: " + "; ".join(problems)}, status_code=400)


@app.get("/", response_class=HTMLResponse)
def index(request: Request, settings: Settings = Depends(get_settings)) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "index.html",
        {"company_name": settings.company_name, "email_enabled": bool(settings.resend_api_key)},
    )


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/api/invoice")
def create_invoice(
    body: InvoiceRequest,
    session: requests.Session = Depends(http_session),
    settings: Settings = Depends(get_settings),
) -> Response:
    try:
        invoice = generate_invoice(body.url, body.buyer_info, session=session, settings=settings)
    except InvoiceError as exc:
        logger.warning("Invoice for {} failed ({}): {}", body.url, exc.category.value, exc)
        return error_response(exc)
    except Exception as exc:
        logger.exception("Unexpected error generating invoice for {}", body.url)
        return unexpected_error_response(exc)
    return Response(
        content=invoice.pdf,
        media_type="application/pdf",
        headers={
            "Content-Disposition": "inline; filename=invoice.pdf",
            "Cache-Control": "no-store",
        },
    )


@app.post("/api/send-email")
def send_email(
    email: Optional[str] = Form(None),
    subject: Optional[str] = Form(None),
    message: Optional[str] = Form(None),
    pdf: Optional[UploadFile] = File(None),
    mailer: Mailer = Depends(get_mailer),
) -> JSONResponse:
    try:
        data = pdf.file.read() if pdf is not None else None
        result = mailer.send_invoice(email, data, subject=subject, message=message)
    except InvoiceError as exc:
        return error_response(exc)
    except Exception as exc:
        logger.exception("Unexpected error sending invoice email")
        return unexpected_error_response(exc)
    return JSONResponse({"success": True, "message": "Email sent successfully", "data": result})
