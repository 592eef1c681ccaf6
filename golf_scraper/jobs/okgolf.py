"""
Okongolf store directory: a paginated table of stores.
"""

import re
from typing import Any, Dict, List, Optional

from ..enumeration import PageEnumeration, Unit
from ..models import FetchResult, JobDefinition
from ..validation import RecordValidator
from .base import HttpPageFetcher, soup_of

JOB_ID = 'okgolf'
BASE_URL = 'https://www.okongolf.co.kr/theongc/app/~search.php'
MAX_PAGE = 200

ROOM_ICON_PATTERN = re.compile(r'new_icon2_(\d+)\.gif$')


def extract_room_count(img_src: str) -> Optional[int]:
    """Room count is encoded in the icon file name, e.g. new_icon2_6.gif."""
    match = ROOM_ICON_PATTERN.search(img_src or '')
    return int(match.group(1)) if match else None


def parse_store_table(html: str) -> List[Dict[str, Any]]:
    """
    Extract stores from one listing page.

    Rows whose first cell is not a number (headers, notices) are skipped.
    A "-" phone means the store has no phone on record and is stored as None.
    """
    soup = soup_of(html)
    stores = []
    for tr in soup.select('table tbody tr'):
        tds = tr.find_all('td')
        if len(tds) < 5:
            continue

        number_text = tds[0].get_text(strip=True)
        if not number_text.isdigit():
            continue

        phone = tds[2].get_text(strip=True)
        img = tds[4].find('img')
        stores.append({
            'number': int(number_text),
            'storeName': tds[1].get_text(strip=True),
            'phoneNumber': None if phone == '-' else phone,
            'address': tds[3].get_text(' ', strip=True),
            'roomCount': extract_room_count(img.get('src', '') if img else ''),
        })
    return stores


class OkgolfFetcher(HttpPageFetcher):

    async def fetch_unit(self, unit: Unit) -> FetchResult:
        params = {
            'page': unit.payload,
            'sido': '', 'sigungu': '', 'search_txt': '',
            'chkswing': '', 'chkleft': '', 'chkca': '',
        }
        html = await self.get_html(BASE_URL, params=params)
        return FetchResult(records=parse_store_table(html))


def create_job() -> JobDefinition:
    return JobDefinition(
        job_id=JOB_ID,
        title='Okongolf stores',
        enumeration_factory=lambda ctx: PageEnumeration(max_page=MAX_PAGE),
        fetcher_factory=lambda ctx: OkgolfFetcher(),
        validator=RecordValidator(required=('storeName', 'address'), phones=('phoneNumber',)),
        record_key=lambda record: record.get('number'),
    )
