import argparse
import asyncio
import logging
import sys

from aria_audit.auditor import AccessibilityAuditor, resolve_rules
from aria_audit.browser import snapshot_page
from aria_audit.config import load_settings
from aria_audit.dom import Document
from aria_audit.errors import AuditError
from aria_audit.fetch import fetch_html, read_html_file
from aria_audit.report import render_html, render_json, render_text

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logger = logging.getLogger(__name__)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Audit a page for nested controls, prohibited names and unlabeled icons.")
    parser.add_argument("target", help="Path to an HTML file, or an http(s) URL")
    parser.add_argument("--live", action="store_true", help="Render in headless Chromium and use computed styles")
    parser.add_argument("--rule", action="append", dest="rules", help="Only run this rule (repeatable)")
    parser.add_argument("--html", dest="html_out", help="Also write the HTML report to this path")
    parser.add_argument("--json", action="store_true", help="Print findings as JSON instead of text")
    parser.add_argument("--trace", action="store_true", help="Print the execution trace")
    return parser


async def load_document(target: str, live: bool) -> Document:
    is_url = target.startswith(("http://", "https://"))
    if live:
        if is_url:
            return await snapshot_page(url=target)
        return await snapshot_page(html=read_html_file(target))
    if is_url:
        return Document(fetch_html(target, load_settings().fetch_timeout))
    return Document(read_html_file(target))


async def run(argv=None) -> int:
    args = _parser().parse_args(argv)
    try:
        rules = resolve_rules(args.rules)
        document = await load_document(args.target, args.live)
    except AuditError as e:
        logger.error(str(e))
        return 2

    result = AccessibilityAuditor(document).analyze(rules)

    if args.json:
        print(render_json(result.findings))
    else:
        print(render_text(result.findings, rules=rules))

    if args.trace:
        print("\n" + "=" * 50)
        print(" EXECUTION TRACE")
        print("=" * 50)
        for step in result.execution_trace:
            print(step)

    if args.html_out:
        with open(args.html_out, "w", encoding="utf-8") as f:
            f.write(render_html(result.findings, title=f"ARIA Audit: {args.target}", rules=rules))
        logger.info(f"HTML report written to {args.html_out}")

    return 1 if any(f.is_failure for f in result.findings) else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(run()))
