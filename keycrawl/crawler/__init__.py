"""Crawler package: frontier, page fetchers, extraction and the BFS loop."""

from keycrawl.crawler.fetcher import HttpFetcher, PageFetcher, PlaywrightFetcher
from keycrawl.crawler.frontier import Frontier, FrontierEmpty
from keycrawl.crawler.keywords import extract_keywords
from keycrawl.crawler.models import CrawlConfig, CrawlJob, CrawlOutcome, PageResult
from keycrawl.crawler.orchestrator import CrawlOrchestrator

__all__ = [
    "CrawlConfig",
    "CrawlJob",
    "CrawlOrchestrator",
    "CrawlOutcome",
    "Frontier",
    "FrontierEmpty",
    "HttpFetcher",
    "PageFetcher",
    "PageResult",
    "PlaywrightFetcher",
    "extract_keywords",
]
