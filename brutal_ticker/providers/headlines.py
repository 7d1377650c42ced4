"""Scraper for market headlines."""

import logging
from typing import Optional
from urllib.parse import urljoin

from playwright.async_api import async_playwright, Browser, Page

from ..config import HeadlineConfig
from ..models import NewsItem, NewsSource
from .base import NewsProvider

logger = logging.getLogger(__name__)

FAILED_NEWS = NewsItem(text="NETWORK ERROR. UNABLE TO RETRIEVE INTEL.", sources=[])
EMPTY_NEWS_TEXT = "NO DATA"


class HeadlineScraper(NewsProvider):
    """Scraper for fetching the top headlines from a news page."""

    def __init__(self, config: Optional[HeadlineConfig] = None) -> None:
        self.config = config or HeadlineConfig()
        self._browser: Optional[Browser] = None
        self._playwright = None

    async def _ensure_browser(self) -> Browser:
        if self._browser is None:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(headless=True)
        return self._browser

    async def fetch_news(self) -> NewsItem:
        try:
            sources = await self._scrape()
        except Exception as e:
            logger.warning("Failed to fetch headlines from %s: %s", self.config.URL, e)
            return FAILED_NEWS
        return build_news_item(sources)

    async def _scrape(self) -> list[NewsSource]:
        browser = await self._ensure_browser()
        page: Page = await browser.new_page()

        try:
            await page.goto(self.config.URL, timeout=self.config.REQUEST_TIMEOUT_MS)
            await page.wait_for_selector(
                self.config.HEADLINE_SELECTOR,
                timeout=self.config.REQUEST_TIMEOUT_MS
            )
            return await self._parse_headlines(page)
        finally:
            await page.close()

    async def _parse_headlines(self, page: Page) -> list[NewsSource]:
        anchors = await page.query_selector_all(self.config.HEADLINE_SELECTOR)
        sources: list[NewsSource] = []
        seen: set[str] = set()

        for anchor in anchors:
            title = " ".join((await anchor.inner_text()).split())
            href = await anchor.get_attribute("href")
            if not title or not href or title in seen:
                continue
            seen.add(title)
            sources.append(NewsSource(title=title, uri=urljoin(self.config.URL, href)))
            if len(sources) >= self.config.MAX_HEADLINES:
                break

        return sources

    async def close(self) -> None:
        if self._browser:
            await self._browser.close()
            self._browser = None
        if self._playwright:
            await self._playwright.stop()
            self._playwright = None


def build_news_item(sources: list[NewsSource]) -> NewsItem:
    """Render scraped headlines as an uppercase list, one per line."""
    if not sources:
        return NewsItem(text=EMPTY_NEWS_TEXT, sources=[])
    return NewsItem(
        text="\n".join(source.title.upper() for source in sources),
        sources=sources,
    )

