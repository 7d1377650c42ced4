"""Tests for the external data providers."""

import asyncio
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from brutal_ticker.config import BedrockConfig, HeadlineConfig, YahooConfig
from brutal_ticker.models import Analysis, Instrument, NewsSource
from brutal_ticker.providers.bedrock import (
    FAILED_ANALYSIS,
    BedrockAnalyst,
    analysis_prompt,
    parse_analysis,
)
from brutal_ticker.providers.headlines import (
    EMPTY_NEWS_TEXT,
    FAILED_NEWS,
    HeadlineScraper,
    build_news_item,
)
from brutal_ticker.providers.yahoo import YahooQuoteProvider, build_quote, format_volume


class TestConfig:
    def test_headline_defaults(self):
        config = HeadlineConfig()
        assert config.REQUEST_TIMEOUT_MS == 30000
        assert config.MAX_HEADLINES == 5

    def test_frozen(self):
        config = HeadlineConfig()
        with pytest.raises(Exception):
            config.URL = "https://other.com"

    def test_bedrock_region_from_env(self, monkeypatch):
        monkeypatch.setenv("AWS_DEFAULT_REGION", "eu-west-1")
        assert BedrockConfig().REGION == "eu-west-1"

    def test_yahoo_aliases(self):
        config = YahooConfig()
        assert config.SYMBOL_ALIASES == {"BTC": "BTC-USD"}
        assert config.SEARCH_MAX_RESULTS == 5


class TestFormatVolume:
    @pytest.mark.parametrize("raw, expected", [
        (85_200_000, "85.2M"),
        (28_400_000_000, "28.4B"),
        (1_500, "1.5K"),
        (999, "999"),
    ])
    def test_suffixes(self, raw, expected):
        assert format_volume(raw) == expected

    @pytest.mark.parametrize("raw", [None, "abc", float("nan"), -5])
    def test_unusable(self, raw):
        assert format_volume(raw) is None


class TestBuildQuote:
    def test_change_from_previous_close(self):
        quote = build_quote(512.0, 510.5, 85_200_000)
        assert quote.price == Decimal("512.00")
        assert quote.change == Decimal("1.50")
        assert quote.change_percent == Decimal("0.29")
        assert quote.volume == "85.2M"

    def test_missing_previous_close(self):
        quote = build_quote(10, None)
        assert quote.change == Decimal("0")
        assert quote.volume is None

    @pytest.mark.parametrize("price", [None, "n/a", -1, float("inf")])
    def test_bad_price(self, price):
        assert build_quote(price, 1) is None


class TestYahooQuoteProvider:
    @patch("brutal_ticker.providers.yahoo.yf")
    def test_fetch_quotes(self, mock_yf):
        good = SimpleNamespace(last_price=101.0, previous_close=100.0, last_volume=2_000_000)
        bad = SimpleNamespace(last_price=None, previous_close=None, last_volume=None)
        mock_yf.Tickers.return_value.tickers = {
            "SPY": SimpleNamespace(fast_info=good),
            "BTC-USD": SimpleNamespace(fast_info=bad),
        }

        quotes = asyncio.run(YahooQuoteProvider().fetch_quotes(["SPY", "BTC"]))

        mock_yf.Tickers.assert_called_once_with("SPY BTC-USD")
        assert list(quotes) == ["SPY"]
        assert quotes["SPY"].change == Decimal("1.00")
        assert quotes["SPY"].volume == "2.0M"

    @patch("brutal_ticker.providers.yahoo.yf")
    def test_fetch_quotes_failure_returns_none(self, mock_yf):
        mock_yf.Tickers.side_effect = RuntimeError("network down")
        assert asyncio.run(YahooQuoteProvider().fetch_quotes(["SPY"])) is None

    @patch("brutal_ticker.providers.yahoo.yf")
    def test_fetch_quotes_nothing_usable_returns_none(self, mock_yf):
        mock_yf.Tickers.return_value.tickers = {}
        assert asyncio.run(YahooQuoteProvider().fetch_quotes(["SPY"])) is None

    def test_fetch_quotes_empty_watchlist(self):
        assert asyncio.run(YahooQuoteProvider().fetch_quotes([])) == {}

    @patch("brutal_ticker.providers.yahoo.yf")
    def test_lookup(self, mock_yf):
        mock_yf.Search.return_value.quotes = []
        mock_yf.Ticker.return_value.info = {
            "symbol": "NVDA",
            "shortName": "NVIDIA Corporation",
            "regularMarketPrice": 875.24,
            "regularMarketPreviousClose": 862.79,
            "regularMarketVolume": 45_200_000,
            "longBusinessSummary": "NVIDIA Corporation provides graphics and compute "
                                   "and networking solutions in the United States.",
        }

        found = asyncio.run(YahooQuoteProvider().lookup("nvda"))

        mock_yf.Ticker.assert_called_once_with("NVDA")
        assert found.symbol == "NVDA"
        assert found.name == "NVIDIA CORPORATION"
        assert found.price == Decimal("875.24")
        assert found.change == Decimal("12.45")
        assert found.volume == "45.2M"
        assert found.description.endswith("...")
        assert found.history == []

    @patch("brutal_ticker.providers.yahoo.yf")
    def test_fetch_quotes_keys_aliased_symbol_by_watchlist_name(self, mock_yf):
        info = SimpleNamespace(last_price=67000.0, previous_close=66000.0, last_volume=28_400_000_000)
        mock_yf.Tickers.return_value.tickers = {"BTC-USD": SimpleNamespace(fast_info=info)}

        quotes = asyncio.run(YahooQuoteProvider().fetch_quotes(["BTC"]))

        assert list(quotes) == ["BTC"]
        assert quotes["BTC"].price == Decimal("67000.00")

    @patch("brutal_ticker.providers.yahoo.yf")
    def test_lookup_by_company_name(self, mock_yf):
        mock_yf.Search.return_value.quotes = [{"symbol": "NVDA", "shortname": "NVIDIA Corporation"}]
        mock_yf.Ticker.return_value.info = {
            "symbol": "NVDA",
            "shortName": "NVIDIA Corporation",
            "regularMarketPrice": 875.24,
            "regularMarketPreviousClose": 862.79,
        }

        found = asyncio.run(YahooQuoteProvider().lookup("nvidia"))

        mock_yf.Search.assert_called_once_with("nvidia", max_results=5, news_count=0)
        mock_yf.Ticker.assert_called_once_with("NVDA")
        assert found.symbol == "NVDA"

    @patch("brutal_ticker.providers.yahoo.yf")
    def test_lookup_search_failure_uses_query_as_ticker(self, mock_yf):
        mock_yf.Search.side_effect = RuntimeError("search down")
        mock_yf.Ticker.return_value.info = {"symbol": "AMD", "regularMarketPrice": 160.0}

        found = asyncio.run(YahooQuoteProvider().lookup("amd"))

        mock_yf.Ticker.assert_called_once_with("AMD")
        assert found.symbol == "AMD"

    @patch("brutal_ticker.providers.yahoo.yf")
    def test_lookup_maps_yahoo_ticker_to_watchlist_symbol(self, mock_yf):
        mock_yf.Search.return_value.quotes = [{"symbol": "BTC-USD"}]
        mock_yf.Ticker.return_value.info = {
            "symbol": "BTC-USD",
            "shortName": "Bitcoin USD",
            "regularMarketPrice": 67000.0,
        }

        found = asyncio.run(YahooQuoteProvider().lookup("bitcoin"))

        mock_yf.Ticker.assert_called_once_with("BTC-USD")
        assert found.symbol == "BTC"

    @patch("brutal_ticker.providers.yahoo.yf")
    def test_lookup_not_found(self, mock_yf):
        mock_yf.Ticker.return_value.info = {"trailingPegRatio": None}
        assert asyncio.run(YahooQuoteProvider().lookup("zzzz")) is None

    @patch("brutal_ticker.providers.yahoo.yf")
    def test_lookup_failure(self, mock_yf):
        mock_yf.Ticker.side_effect = RuntimeError("boom")
        assert asyncio.run(YahooQuoteProvider().lookup("nvda")) is None


class TestParseAnalysis:
    def test_valid(self):
        result = parse_analysis('{"summary": "VOLATILE. UP.", "sentiment": "BULLISH"}')
        assert result == Analysis("VOLATILE. UP.", "BULLISH")

    def test_code_fences(self):
        text = '```json\n{"summary": "FLAT.", "sentiment": "neutral"}\n```'
        assert parse_analysis(text) == Analysis("FLAT.", "NEUTRAL")

    @pytest.mark.parametrize("text", [
        "",
        "not json",
        "[1, 2]",
        '{"summary": "X", "sentiment": "MOON"}',
        '{"summary": "", "sentiment": "BEARISH"}',
        '{"sentiment": "BEARISH"}',
    ])
    def test_malformed(self, text):
        assert parse_analysis(text) is None


class TestBedrockAnalyst:
    def instrument(self):
        return Instrument("SPY", price=Decimal("512"), change=Decimal("1.5"),
                          change_percent=Decimal("0.29"), volume="85.2M")

    def test_prompt_contains_quote(self):
        prompt = analysis_prompt(self.instrument())
        assert "Symbol: SPY" in prompt
        assert "Change: 1.5 (0.29%)" in prompt

    def test_analyze(self):
        llm = MagicMock()
        llm.ainvoke = AsyncMock(return_value=SimpleNamespace(
            content='{"summary": "BUYERS IN CONTROL.", "sentiment": "BULLISH"}'
        ))

        result = asyncio.run(BedrockAnalyst(llm=llm).analyze(self.instrument()))

        assert result == Analysis("BUYERS IN CONTROL.", "BULLISH")
        messages = llm.ainvoke.await_args.args[0]
        assert "Symbol: SPY" in messages[-1].content

    def test_model_error_returns_placeholder(self):
        llm = MagicMock()
        llm.ainvoke = AsyncMock(side_effect=RuntimeError("throttled"))
        result = asyncio.run(BedrockAnalyst(llm=llm).analyze(self.instrument()))
        assert result == FAILED_ANALYSIS
        assert result.sentiment == "NEUTRAL"

    def test_malformed_reply_returns_placeholder(self):
        llm = MagicMock()
        llm.ainvoke = AsyncMock(return_value=SimpleNamespace(content="SURE! HERE IS MY ANALYSIS"))
        result = asyncio.run(BedrockAnalyst(llm=llm).analyze(self.instrument()))
        assert result == FAILED_ANALYSIS

    @patch("brutal_ticker.providers.bedrock.ChatBedrock")
    def test_builds_chat_model_from_config(self, mock_chat):
        config = BedrockConfig(MODEL_ID="test-model", REGION="us-west-2")
        BedrockAnalyst(config)
        mock_chat.assert_called_once_with(
            model="test-model",
            model_kwargs={"temperature": 0.0},
            region_name="us-west-2",
        )


class TestHeadlineScraper:
    def test_build_news_item(self):
        sources = [
            NewsSource("Stocks rally", "https://example.com/a"),
            NewsSource("Oil slips", "https://example.com/b"),
        ]
        item = build_news_item(sources)
        assert item.text == "STOCKS RALLY\nOIL SLIPS"
        assert item.sources == sources

    def test_build_news_item_empty(self):
        assert build_news_item([]).text == EMPTY_NEWS_TEXT

    def test_fetch_failure_returns_placeholder(self):
        scraper = HeadlineScraper()
        with patch.object(scraper, "_scrape", AsyncMock(side_effect=TimeoutError("slow"))):
            assert asyncio.run(scraper.fetch_news()) == FAILED_NEWS

    def test_parse_headlines(self):
        def anchor(text, href):
            element = MagicMock()
            element.inner_text = AsyncMock(return_value=text)
            element.get_attribute = AsyncMock(return_value=href)
            return element

        page = MagicMock()
        page.query_selector_all = AsyncMock(return_value=[
            anchor("  Fed holds\n rates ", "/news/fed"),
            anchor("Fed holds rates", "/news/fed-dup"),
            anchor("", "/news/empty"),
            anchor("Chip stocks surge", "https://other.example/chips"),
            anchor("Bonds rally", "/news/bonds"),
        ])
        scraper = HeadlineScraper(HeadlineConfig(URL="https://news.example/latest/", MAX_HEADLINES=2))

        sources = asyncio.run(scraper._parse_headlines(page))

        assert sources == [
            NewsSource("Fed holds rates", "https://news.example/news/fed"),
            NewsSource("Chip stocks surge", "https://other.example/chips"),
        ]

    def test_close_without_browser(self):
        asyncio.run(HeadlineScraper().close())
