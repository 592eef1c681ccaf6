"""
Citeezon shop details: visits every shop collected by the citeezon job
and attaches its room/feature table.
"""

import asyncio
from typing import Any, Dict

from ..enumeration import IndexEnumeration, Unit
from ..errors import SetupError, TransientFetchError
from ..models import FetchResult, JobContext, JobDefinition
from ..validation import RecordValidator
from . import citeezon
from .base import HttpPageFetcher, soup_of

JOB_ID = 'citeezon_details'
INPUT_JOB_ID = citeezon.JOB_ID


def _cell_label(td) -> str:
    span = td.find('span')
    return span.get_text(strip=True) if span else ''


def _cell_value(td) -> str:
    div = td.find('div')
    return div.get_text(' ', strip=True) if div else ''


def parse_shop_details(html: str) -> Dict[str, str]:
    """
    Read the detail table into {label: value}.

    Room cells come in (head, sub, spacer) triples; feature rows use
    dedicated head/sub classes.

    Raises:
        TransientFetchError: if the page has no detail table yet
    """
    soup = soup_of(html)
    body = soup.find('tbody')
    if body is None:
        raise TransientFetchError("detail table not found")

    info = {}
    for tr in body.find_all('tr'):
        tds = tr.find_all('td')
        if len(tds) < 2:
            continue

        for j in range(0, len(tds) - 1, 3):
            name = _cell_label(tds[j])
            if name:
                info[name] = _cell_value(tds[j + 1])

        head = tr.select_one('td.shop_view_info_head.cursor_pnt')
        sub = tr.select_one('td.shop_view_info_sub.txt_bk5')
        if head is not None and sub is not None:
            name = _cell_label(head)
            if name:
                info[name] = _cell_value(sub)
    return info


async def load_input(ctx: JobContext) -> IndexEnumeration:
    """Enumerate the citeezon collection; it must exist before this job runs."""
    shops = await asyncio.to_thread(ctx.sink.load_all, INPUT_JOB_ID)
    if not shops:
        raise SetupError(
            f"Input collection '{INPUT_JOB_ID}' is empty or missing; run the {INPUT_JOB_ID} job first"
        )
    ctx.log.info(f"Loaded {len(shops)} shops from '{INPUT_JOB_ID}'")
    return IndexEnumeration(shops)


class CiteezonDetailsFetcher(HttpPageFetcher):

    async def fetch_unit(self, unit: Unit) -> FetchResult:
        shop: Dict[str, Any] = unit.payload
        html = await self.get_html(f"{citeezon.SITE_URL}{shop.get('link', '')}")
        detailed = dict(shop)
        detailed['details'] = parse_shop_details(html)
        return FetchResult(records=[detailed])


def create_job() -> JobDefinition:
    return JobDefinition(
        job_id=JOB_ID,
        title='Citeezon shop details',
        enumeration_factory=load_input,
        fetcher_factory=lambda ctx: CiteezonDetailsFetcher(),
        validator=RecordValidator(required=('name', 'link'), phones=('tel',)),
        record_key=lambda record: record.get('link'),
        known_unit_key=lambda unit: unit.payload.get('link'),
    )
