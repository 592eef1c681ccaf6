"""
SG Golf store search: paginated store rows per region, with the region
list read from the search form itself.
"""

import re
from typing import Any, Dict, List, Optional

import httpx

from ..enumeration import RegionPageEnumeration, Unit
from ..errors import SetupError, TransientFetchError
from ..models import FetchResult, JobContext, JobDefinition
from ..validation import RecordValidator
from .base import HttpPageFetcher, soup_of, text_of

JOB_ID = 'sggolf'
SITE_URL = 'https://sggolf.com'
BASE_URL = f'{SITE_URL}/store/searchList'
MAX_PAGE = 100

VIEW_PAGE_PATTERN = re.compile(r"go_viewPage\('(\d+)'\)")


def parse_regions(html: str) -> List[Dict[str, str]]:
    """Options of the #regions select, without the empty "all" entry."""
    soup = soup_of(html)
    regions = []
    for option in soup.select('#regions option'):
        value = option.get('value', '').strip()
        if value:
            regions.append({'name': option.get_text(strip=True), 'value': value})
    return regions


def parse_store_rows(html: str) -> List[Dict[str, Any]]:
    """Store rows that link to a detail page; rows without one are skipped."""
    soup = soup_of(html)
    stores = []
    for row in soup.select('tr[name="mapList"]'):
        button = row.select_one('#btns a.btn-blue')
        match = VIEW_PAGE_PATTERN.search(button.get('onclick', '') if button else '')
        if not match:
            continue
        stores.append({
            'storeName': text_of(row, '#storeName'),
            'address': text_of(row, '.store-info .info-addr'),
            'tel': text_of(row, '.store-info .info-tel'),
            'link': f'{SITE_URL}/store/detail/{match.group(1)}',
        })
    return stores


def has_next_page(html: str, page: int) -> bool:
    return soup_of(html).select_one(f'.p-num a.dev_paging:nth-child({page + 1})') is not None


async def load_regions(ctx: JobContext, client: Optional[httpx.AsyncClient] = None) -> RegionPageEnumeration:
    """
    Read the region list from the search page.

    Raises:
        SetupError: if the page cannot be read or lists no regions
    """
    async with HttpPageFetcher(client=client) as fetcher:
        try:
            html = await fetcher.get_html(BASE_URL)
        except TransientFetchError as e:
            raise SetupError(f"Region list unavailable: {e}") from e

    regions = parse_regions(html)
    if not regions:
        raise SetupError(f"No regions found on {BASE_URL}")
    ctx.log.info(f"Loaded {len(regions)} regions")
    return RegionPageEnumeration(regions, max_page=MAX_PAGE, name=lambda region: region['name'])


class SggolfFetcher(HttpPageFetcher):

    async def fetch_unit(self, unit: Unit) -> FetchResult:
        region, page = unit.payload
        html = await self.get_html(BASE_URL, params={'regions': region['value'], 'page': page})
        stores = parse_store_rows(html)
        for store in stores:
            store['region'] = region['name']
        return FetchResult(records=stores, has_more=has_next_page(html, page))


def create_job() -> JobDefinition:
    return JobDefinition(
        job_id=JOB_ID,
        title='SG Golf stores',
        enumeration_factory=load_regions,
        fetcher_factory=lambda ctx: SggolfFetcher(),
        validator=RecordValidator(required=('storeName', 'link'), phones=('tel',)),
        record_key=lambda record: record.get('link'),
    )
