"""
Live-page collaborators: rendering a page in headless Chromium so the rule
engine sees real computed styles, and highlighting a finding's elements.
Neither contains audit logic.
"""
import os
import logging
import tempfile
from typing import Optional

from playwright.async_api import async_playwright

from aria_audit.config import load_settings
from aria_audit.dom import STAMP_PREFIX, STAMPED_PROPERTIES, Document
from aria_audit.errors import AuditInputError, PageFetchError
from aria_audit.models import Finding

logger = logging.getLogger(__name__)

# Stamps computed styles, serialises, and removes the stamps in one synchronous turn
SNAPSHOT_SCRIPT = """([prefix, props]) => {
    const all = Array.from(document.querySelectorAll('*'));
    for (const el of all) {
        const style = window.getComputedStyle(el);
        for (const prop of props) el.setAttribute(prefix + prop, style.getPropertyValue(prop));
    }
    const html = document.documentElement.outerHTML;
    for (const el of all) {
        for (const prop of props) el.removeAttribute(prefix + prop);
    }
    return html;
}"""

# The first highlight records the page's own outline; repeats only restart the timer
HIGHLIGHT_SCRIPT = """([selectors, colors, delay]) => {
    const state = window.__ariaAuditHighlight || (window.__ariaAuditHighlight = {originals: new WeakMap(), timers: new WeakMap()});
    selectors.forEach((selector, i) => {
        const el = document.querySelector(selector);
        if (!el) return;
        if (i === 0) {
            el.scrollIntoView({behavior: 'auto', block: 'center'});
            if (el.focus) el.focus();
        }
        if (!state.originals.has(el)) state.originals.set(el, el.style.outline);
        clearTimeout(state.timers.get(el));
        el.style.outline = '4px solid ' + colors[i];
        state.timers.set(el, setTimeout(() => {
            el.style.outline = state.originals.get(el);
            state.originals.delete(el);
            state.timers.delete(el);
        }, delay));
    });
    return selectors.filter(s => document.querySelector(s) !== null).length;
}"""

CHILD_COLOR = "#0052cc"
PARENT_COLOR = "#bf2600"


async def snapshot_page(url: Optional[str] = None, html: Optional[str] = None, viewport=None) -> Document:
    """Renders a URL or an HTML string and returns its DOM with computed display/visibility stamped."""
    if not url and not html:
        raise AuditInputError("snapshot_page needs a url or html")

    temp_file_path = None
    try:
        async with async_playwright() as p:
            browser = await p.chromium.launch()
            try:
                context = await browser.new_context(viewport=viewport or {"width": 1280, "height": 720})
                page = await context.new_page()

                if html:
                    # Served from a file so relative resources and origin behave like a real page
                    with tempfile.NamedTemporaryFile(mode="w", delete=False, suffix=".html", encoding="utf-8") as f:
                        f.write(html)
                        temp_file_path = f.name
                    url = f"file://{temp_file_path}"

                logger.info(f"Rendering {url} for live audit...")
                await page.goto(url)
                markup = await page.evaluate(SNAPSHOT_SCRIPT, [STAMP_PREFIX, list(STAMPED_PROPERTIES)])
            finally:
                await browser.close()
    except AuditInputError:
        raise
    except Exception as e:
        logger.error(f"Live snapshot of {url} failed: {e}", exc_info=True)
        raise PageFetchError(f"Could not render {url}: {e}") from e
    finally:
        if temp_file_path and os.path.exists(temp_file_path):
            os.remove(temp_file_path)

    return Document(markup)


async def highlight_element(page, finding: Finding, duration_ms: Optional[int] = None) -> int:
    """
    Outlines a finding's element (blue) and, for two-element findings, its
    parent (red) in a live page; the page restores the old outlines after
    duration_ms (settings.highlight_ms by default). Returns how many selectors matched.
    """
    if duration_ms is None:
        duration_ms = load_settings().highlight_ms
    colors = [CHILD_COLOR, PARENT_COLOR] if len(finding.selectors) > 1 else [PARENT_COLOR]
    return await page.evaluate(HIGHLIGHT_SCRIPT, [list(finding.selectors), colors, duration_ms])
