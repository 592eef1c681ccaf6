"""
Citeezon shop list: paginated cards linking to per-shop detail pages.
"""

from typing import Any, Dict, List

from ..enumeration import PageEnumeration, Unit
from ..models import FetchResult, JobDefinition
from ..validation import RecordValidator
from .base import HttpPageFetcher, soup_of, text_of

JOB_ID = 'citeezon'
SITE_URL = 'http://www.citeezon.co.kr'
LIST_URL = f'{SITE_URL}/V/sub/shop/shop.list.asp'
MAX_PAGE = 100


def parse_shop_list(html: str) -> List[Dict[str, Any]]:
    """Extract shop cards (name, address, tel, relative link) from a list page."""
    soup = soup_of(html)
    shops = []
    for li in soup.select('ul.shop_list > li'):
        anchor = li.find('a')
        if anchor is None:
            continue

        name = f"{text_of(li, 'div.shop_title')} {text_of(li, 'div.shop_point')}".strip()
        shops.append({
            'name': name,
            'address': text_of(li, 'div.shop_address > div.shop_info_content'),
            'tel': text_of(li, 'div.shop_tel > div.shop_info_content'),
            'link': anchor.get('href', ''),
        })
    return shops


class CiteezonFetcher(HttpPageFetcher):

    async def fetch_unit(self, unit: Unit) -> FetchResult:
        html = await self.get_html(LIST_URL, params={'Page': unit.payload, 'sido': ''})
        return FetchResult(records=parse_shop_list(html))


def create_job() -> JobDefinition:
    return JobDefinition(
        job_id=JOB_ID,
        title='Citeezon shops',
        enumeration_factory=lambda ctx: PageEnumeration(max_page=MAX_PAGE),
        fetcher_factory=lambda ctx: CiteezonFetcher(),
        validator=RecordValidator(required=('name', 'link'), phones=('tel',)),
        record_key=lambda record: record.get('link'),
    )
