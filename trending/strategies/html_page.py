"""
Strategy that scrapes a public page for trending titles.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from crawler.extractors.embedded_json import parse_yt_initial_data
from crawler.extractors.selectors import select_titles
from crawler.infra.http import Deadline
from crawler.schemas.models import TrendRecord
from trending.models import Source, SourceKind
from trending.strategies.base import Strategy, StrategyContext, option_int

PageParser = Callable[[str, int], List[TrendRecord]]

PAGE_PARSERS: Dict[str, PageParser] = {
    "yt-initial-data": parse_yt_initial_data,
}


class HtmlPageStrategy(Strategy):
    """
    Tries `selector` first and `fallback_selector` only when the first one
    matched nothing usable. Exact repeats within one extraction are dropped by
    the selector helper.
    """

    kind = SourceKind.HTML_PAGE

    def __init__(
        self,
        source: Source,
        selector: Optional[str] = None,
        fallback_selector: Optional[str] = None,
        fallback_min_length: int = 1,
        fallback_max_length: Optional[int] = None,
        link_attr: Optional[str] = None,
        title_prefix: str = "",
        parser: Optional[PageParser] = None,
        scan_limit: Optional[int] = 30,
        limit: Optional[int] = None,
        label: Optional[str] = None,
    ) -> None:
        super().__init__(source, limit=limit, label=label)
        if not selector and parser is None:
            raise ValueError("HtmlPageStrategy needs a selector or a page parser")
        self.selector = selector
        self.fallback_selector = fallback_selector
        self.fallback_min_length = fallback_min_length
        self.fallback_max_length = fallback_max_length
        self.link_attr = link_attr
        self.title_prefix = title_prefix
        self.parser = parser
        self.scan_limit = scan_limit

    def collect(self, ctx: StrategyContext, deadline: Deadline) -> List[TrendRecord]:
        html = ctx.fetcher.get_text(self.source.resolve(ctx.instance), deadline, headers=self.source.extra_headers or None)
        return self.extract(html)

    def extract(self, html: str) -> List[TrendRecord]:
        if self.parser is not None:
            records = self.parser(html, self.limit or self.scan_limit or 20)
        else:
            records = select_titles(html, self.selector, limit=self.scan_limit)
            if not records and self.fallback_selector:
                records = select_titles(
                    html,
                    self.fallback_selector,
                    limit=self.scan_limit,
                    min_length=self.fallback_min_length,
                    max_length=self.fallback_max_length,
                    link_attr=self.link_attr,
                )
        if self.title_prefix:
            records = [self._prefixed(record) for record in records]
        return records

    def _prefixed(self, record: TrendRecord) -> TrendRecord:
        if record.title.startswith(self.title_prefix):
            return record
        return record.model_copy(update={"title": f"{self.title_prefix}{record.title}"})

    @classmethod
    def from_config(cls, source: Source, options: Dict[str, Any]) -> "HtmlPageStrategy":
        parser_name = options.get("parser")
        parser = None
        if parser_name:
            if parser_name not in PAGE_PARSERS:
                raise ValueError(f"Unknown html-page parser '{parser_name}'")
            parser = PAGE_PARSERS[parser_name]
        scan_limit = options.get("scan_limit", 30)
        max_length = options.get("fallback_max_length")
        return cls(
            source,
            selector=options.get("selector"),
            fallback_selector=options.get("fallback_selector"),
            fallback_min_length=int(options.get("fallback_min_length", 1)),
            fallback_max_length=int(max_length) if max_length is not None else None,
            link_attr=options.get("link_attr"),
            title_prefix=options.get("title_prefix", ""),
            parser=parser,
            scan_limit=int(scan_limit) if scan_limit else None,
            limit=option_int(options, "limit"),
            label=options.get("label"),
        )
