import asyncio
import logging
import sys
from io import BytesIO
from typing import List, Optional

import openpyxl
import pandas as pd
from dotenv import load_dotenv
from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, StreamingResponse
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from aria_audit.auditor import AccessibilityAuditor
from aria_audit.browser import snapshot_page
from aria_audit.config import load_settings
from aria_audit.dom import Document
from aria_audit.errors import AuditInputError, PageFetchError
from aria_audit.fetch import fetch_html
from aria_audit.models import AuditResult, RULE_ORDER, STATUS_FAIL
from aria_audit.report import findings_to_rows, render_html

load_dotenv()

logger = logging.getLogger(__name__)

app = FastAPI(title="ARIA Audit")

# Local development origins for a report UI
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class AuditInput(BaseModel):
    html: Optional[str] = None
    url: Optional[str] = None
    rules: Optional[List[str]] = None
    live: bool = False


async def _load_document(input_data: AuditInput) -> Document:
    """Static parse of the given markup/URL, or a live Chromium snapshot when live=True."""
    if not input_data.html and not input_data.url:
        raise AuditInputError("Provide either 'html' or 'url'.")

    if input_data.live:
        return await snapshot_page(url=input_data.url, html=input_data.html)

    if input_data.html:
        return Document(input_data.html)

    settings = load_settings()
    html = await run_in_threadpool(fetch_html, input_data.url, settings.fetch_timeout)
    return Document(html)


async def _audit(input_data: AuditInput) -> AuditResult:
    try:
        document = await _load_document(input_data)
        return AccessibilityAuditor(document).analyze(input_data.rules)
    except AuditInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PageFetchError as e:
        logger.error(f"Page load failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))


@app.get("/")
def read_root():
    return {"message": "ARIA Audit API is running", "rules": list(RULE_ORDER)}


@app.post("/audit", response_model=AuditResult)
async def audit_page(input_data: AuditInput):
    return await _audit(input_data)


@app.post("/audit/report", response_class=HTMLResponse)
async def audit_report(input_data: AuditInput):
    result = await _audit(input_data)
    title = f"ARIA Audit: {input_data.url}" if input_data.url else "ARIA Audit"
    return HTMLResponse(render_html(result.findings, title=title, rules=input_data.rules))


@app.post("/batch/process")
async def batch_audit(file: UploadFile = File(...)):
    """
    Accepts an Excel file with a 'URL' column.
    Fetches and audits every URL, appends per-rule failure counts to the
    original sheet, adds a 'Findings' sheet, and returns the workbook.
    """
    contents = await file.read()
    try:
        df = pd.read_excel(BytesIO(contents))
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Could not read Excel file: {e}")

    if "URL" not in df.columns:
        raise HTTPException(status_code=400, detail="Excel must have a 'URL' column (Case-sensitive).")

    settings = load_settings()

    async def process_row(index, url):
        result = {"Status": "OK", "Error": ""}
        result.update({f"Failures_{rule}": 0 for rule in RULE_ORDER})
        findings = []

        if not isinstance(url, str) or not url.strip():
            result["Status"] = "SKIPPED_EMPTY"
            return result, findings

        logger.info(f"Starting Row {index+1}: {url[:60]}...")
        try:
            html = await run_in_threadpool(fetch_html, url.strip(), settings.fetch_timeout)
            audit = AccessibilityAuditor(Document(html), settings=settings).analyze()
        except PageFetchError as e:
            result["Status"] = "FETCH_ERROR"
            result["Error"] = str(e)
            return result, findings

        for rule, per_status in audit.counts.items():
            result[f"Failures_{rule}"] = per_status.get(STATUS_FAIL, 0)
        for row in findings_to_rows(audit.findings):
            findings.append({"URL": url, **row})
        return result, findings

    sem = asyncio.Semaphore(settings.batch_concurrency)

    async def process_row_with_sem(index, url):
        async with sem:
            return await process_row(index, url)

    logger.info(f"Auditing {len(df)} rows in PARALLEL (Concurrency restricted to {settings.batch_concurrency})...")
    results = await asyncio.gather(*[process_row_with_sem(i, r["URL"]) for i, r in df.iterrows()])

    summaries = [summary for summary, _ in results]
    for key in (summaries[0].keys() if summaries else []):
        df[key] = [s[key] for s in summaries]
    detail_rows = [row for _, rows in results for row in rows]

    output_stream = BytesIO()
    with pd.ExcelWriter(output_stream, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="Pages", index=False)
        pd.DataFrame(detail_rows, columns=["URL", "Rule", "Status", "Element", "Role", "Parent", "Parent Role", "Message", "Suggestion", "Selector"]).to_excel(
            writer, sheet_name="Findings", index=False
        )
    output_stream.seek(0)

    # Readable column widths on the findings sheet
    wb = openpyxl.load_workbook(output_stream)
    ws = wb["Findings"]
    for column, width in {"A": 40, "H": 60, "I": 60, "J": 50}.items():
        ws.column_dimensions[column].width = width

    final_stream = BytesIO()
    wb.save(final_stream)
    final_stream.seek(0)

    headers = {"Content-Disposition": 'attachment; filename="aria_audit_results.xlsx"'}
    return StreamingResponse(final_stream, media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", headers=headers)


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logger.info("Starting ARIA Audit Server...")
    uvicorn.run(app, host="0.0.0.0", port=8000)
