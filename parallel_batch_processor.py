import os
import logging
import concurrent.futures

import pandas as pd

from aria_audit.auditor import AccessibilityAuditor
from aria_audit.config import load_settings
from aria_audit.dom import Document
from aria_audit.errors import PageFetchError
from aria_audit.fetch import fetch_html
from aria_audit.models import RULE_ORDER, STATUS_FAIL

# Configure Logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] Worker-%(threadName)s: %(message)s",
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger(__name__)

INPUT_FILE = "urls.csv"
OUTPUT_FILE = "aria_audit_output.csv"
MAX_WORKERS = 5


def process_row(index, url, settings):
    """
    Fetches and audits a single URL.
    Returns: (index, {column: value})
    """
    result = {"Status": "OK", "Error": ""}
    result.update({f"Failures_{rule}": 0 for rule in RULE_ORDER})

    if not isinstance(url, str) or not url.strip():
        result["Status"] = "SKIPPED_EMPTY"
        return index, result

    try:
        html = fetch_html(url.strip(), settings.fetch_timeout)
    except PageFetchError as e:
        logger.error(f"Row {index}: {e}")
        result["Status"] = "FETCH_ERROR"
        result["Error"] = str(e)
        return index, result

    audit = AccessibilityAuditor(Document(html), settings=settings).analyze()
    for rule, per_status in audit.counts.items():
        result[f"Failures_{rule}"] = per_status.get(STATUS_FAIL, 0)

    logger.info(f"Row {index}: {sum(f.is_failure for f in audit.findings)} failures on {url}")
    return index, result


def main():
    input_file = INPUT_FILE
    if not os.path.exists(input_file):
        if os.path.exists("urls.xlsx"):
            logger.info("Converting urls.xlsx to urls.csv...")
            pd.read_excel("urls.xlsx").to_csv(input_file, index=False)
        else:
            logger.error(f"Input file '{input_file}' (or .xlsx) not found.")
            return

    logger.info(f"Reading {input_file}...")
    df = pd.read_csv(input_file)

    if "URL" not in df.columns:
        logger.error("Column 'URL' missing in CSV.")
        return

    settings = load_settings()
    logger.info(f"Starting parallel audit of {len(df)} rows with {MAX_WORKERS} workers...")

    results = {}
    with concurrent.futures.ThreadPoolExecutor(max_workers=MAX_WORKERS) as executor:
        future_to_index = {
            executor.submit(process_row, idx, row["URL"], settings): idx
            for idx, row in df.iterrows()
        }

        for future in concurrent.futures.as_completed(future_to_index):
            idx = future_to_index[future]
            try:
                processed_idx, row_result = future.result()
                results[processed_idx] = row_result
            except Exception as e:
                logger.error(f"Row {idx} generated an exception: {e}")
                results[idx] = {"Status": "THREAD_EXCEPTION", "Error": str(e)}

    # Consolidate Results in Order
    logger.info("Consolidating results...")
    for idx, row_result in results.items():
        for column, value in row_result.items():
            df.at[idx, column] = value

    logger.info(f"Saving to {OUTPUT_FILE}...")
    df.to_csv(OUTPUT_FILE, index=False)
    logger.info("Done!")


if __name__ == "__main__":
    main()
