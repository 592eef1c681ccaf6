"""
Friends Screen shop search: one address search per province/district,
following the "more" pagination until it disappears.
"""

import asyncio
import re
from typing import Any, Dict, List, Optional

import httpx

from ..enumeration import RegionEnumeration, Unit
from ..models import FetchResult, JobDefinition
from ..resilience.status_registry import CancellationToken
from ..validation import RecordValidator
from .base import HttpPageFetcher, soup_of, text_of
from .regions import REGIONS

JOB_ID = 'friendgolf'
BASE_URL = 'https://www.friendsscreen.kr/main/shop'
MAX_MORE_PAGES = 50

SHOP_ID_PATTERN = re.compile(r'shop_detail\((\d+)\)')


def parse_shop_list(html: str) -> List[Dict[str, Any]]:
    """
    Extract shops from one search result page.

    Entries without a shop_detail(<id>) handler cannot be told apart
    across pages and are left out.
    """
    soup = soup_of(html)
    shops = []
    for li in soup.select('#shopList > li'):
        match = SHOP_ID_PATTERN.search(li.get('onclick', ''))
        if not match:
            continue
        shops.append({
            'name': text_of(li, '.title'),
            'address': text_of(li, '.address'),
            'tel': text_of(li, 'a.tel'),
            'shopId': match.group(1),
        })
    return shops


def has_more_button(html: str) -> bool:
    return soup_of(html).select_one('#moreBtn') is not None


class FriendgolfFetcher(HttpPageFetcher):
    """
    Reads every "more" page of one district search.

    Args:
        more_delay: Seconds to wait between two pages of the same district
        token: Stop signal checked before each follow-up page
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
        more_delay: float = 2.0,
        token: Optional[CancellationToken] = None,
    ):
        super().__init__(client=client, timeout=timeout)
        self.more_delay = more_delay
        self.token = token

    async def fetch_unit(self, unit: Unit) -> FetchResult:
        province, district = unit.payload
        shops: Dict[str, Dict[str, Any]] = {}

        for page in range(1, MAX_MORE_PAGES + 1):
            if page > 1:
                if self.token is not None and self.token.cancelled:
                    return FetchResult(records=list(shops.values()), complete=False)
                await asyncio.sleep(self.more_delay)

            html = await self.get_html(BASE_URL, params={
                'search_type': 'address',
                'search_word': district,
                'page': page,
            })
            found = parse_shop_list(html)
            for shop in found:
                shop['province'] = province
                shop['district'] = district
                shops.setdefault(shop['shopId'], shop)

            if not found or not has_more_button(html):
                break

        # A district without shops is normal; it does not end the region walk
        return FetchResult(records=list(shops.values()))


def create_fetcher(ctx) -> FriendgolfFetcher:
    more_delay = ctx.config.rate_limit.more_delay if ctx.config is not None else 2.0
    return FriendgolfFetcher(more_delay=more_delay, token=ctx.token)


def create_job() -> JobDefinition:
    return JobDefinition(
        job_id=JOB_ID,
        title='FriendGolf shops',
        enumeration_factory=lambda ctx: RegionEnumeration(REGIONS),
        fetcher_factory=create_fetcher,
        validator=RecordValidator(required=('name', 'shopId'), phones=('tel',)),
        record_key=lambda record: record.get('shopId'),
    )
