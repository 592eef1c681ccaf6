"""Tests for page, index, region and region page enumeration."""

from itertools import islice

from golf_scraper.enumeration import IndexEnumeration, PageEnumeration, RegionEnumeration, RegionPageEnumeration


class TestPageEnumeration:

    def test_starts_at_first_page_by_default(self):
        units = list(islice(PageEnumeration().units(), 3))
        assert [u.payload for u in units] == [1, 2, 3]
        assert units[0].label == 'page 1'
        assert units[0].position == {'currentPage': 1}
        assert units[0].next_position == {'currentPage': 2}

    def test_resumes_at_recorded_page(self):
        unit = next(PageEnumeration().units({'currentPage': 7}))
        assert unit.payload == 7
        assert unit.seq == 0

    def test_bounded_by_max_page(self):
        units = list(PageEnumeration(max_page=3).units({'currentPage': 2}))
        assert [u.payload for u in units] == [2, 3]

    def test_past_the_end_yields_nothing(self):
        assert list(PageEnumeration(max_page=3).units({'currentPage': 4})) == []

    def test_stops_on_empty(self):
        assert PageEnumeration.stop_on_empty is True
        assert IndexEnumeration.stop_on_empty is False

    def test_record_validity(self):
        enum = PageEnumeration()
        assert enum.is_valid_record({'currentPage': 3})
        assert enum.is_valid_record({})
        assert not enum.is_valid_record({'currentPage': 'three'})
        assert not enum.is_valid_record({'currentPage': -1})
        assert not enum.is_valid_record({'currentPage': True})


class TestIndexEnumeration:

    def test_one_unit_per_item(self):
        units = list(IndexEnumeration(['a', 'b', 'c']).units())
        assert [u.payload for u in units] == ['a', 'b', 'c']
        assert units[1].label == 'item 2/3'
        assert units[2].next_position == {'currentIndex': 3}

    def test_resumes_at_index(self):
        units = list(IndexEnumeration(['a', 'b', 'c']).units({'currentIndex': 2}))
        assert [u.payload for u in units] == ['c']

    def test_index_past_end(self):
        assert list(IndexEnumeration(['a']).units({'currentIndex': 5})) == []


class TestRegionEnumeration:
    REGIONS = [('Seoul', ['Jongno', 'Jung']), ('Busan', ['Haeundae']), ('Jeju', ['Jeju', 'Seogwipo'])]

    def test_walks_every_region_and_area(self):
        units = list(RegionEnumeration(self.REGIONS).units())
        assert [u.payload for u in units] == [
            ('Seoul', 'Jongno'), ('Seoul', 'Jung'), ('Busan', 'Haeundae'),
            ('Jeju', 'Jeju'), ('Jeju', 'Seogwipo'),
        ]
        assert units[0].label == 'Seoul Jongno'

    def test_last_area_moves_to_next_region(self):
        units = list(RegionEnumeration(self.REGIONS).units())
        assert units[1].next_position == {'currentRegionIndex': 1, 'currentPageIndex': 0}

    def test_resume_mid_region_only_skips_in_that_region(self):
        units = list(RegionEnumeration(self.REGIONS).units(
            {'currentRegionIndex': 2, 'currentPageIndex': 1}
        ))
        assert [u.payload for u in units] == [('Jeju', 'Seogwipo')]

        units = list(RegionEnumeration(self.REGIONS).units(
            {'currentRegionIndex': 0, 'currentPageIndex': 1}
        ))
        assert units[0].payload == ('Seoul', 'Jung')
        assert units[1].payload == ('Busan', 'Haeundae')

    def test_default_record(self):
        assert RegionEnumeration(self.REGIONS).default_record() == {
            'currentRegionIndex': 0,
            'currentPageIndex': 0,
        }


class TestRegionPageEnumeration:

    def test_default_record(self):
        assert RegionPageEnumeration(['A', 'B']).default_record() == {'currentRegion': 0, 'currentPage': 1}

    def test_pages_within_region_until_max_page(self):
        units = list(RegionPageEnumeration(['A', 'B'], max_page=2).units())
        assert [u.payload for u in units] == [('A', 1), ('A', 2), ('B', 1), ('B', 2)]
        assert [u.group for u in units] == [0, 0, 1, 1]
        assert units[1].label == 'A page 2'
        assert units[1].position == {'currentRegion': 0, 'currentPage': 2}
        assert units[1].next_position == {'currentRegion': 0, 'currentPage': 3}

    def test_resume_only_offsets_the_recorded_region(self):
        units = list(RegionPageEnumeration(['A', 'B', 'C'], max_page=3).units(
            {'currentRegion': 1, 'currentPage': 3}
        ))
        assert [u.payload for u in units] == [('B', 3), ('C', 1), ('C', 2), ('C', 3)]
        assert units[0].seq == 0

    def test_ending_a_group_moves_to_next_region(self):
        enum = RegionPageEnumeration(['A', 'B'])
        units = enum.units()

        assert next(units).payload == ('A', 1)
        assert next(units).payload == ('A', 2)
        enum.end_group(0)

        assert enum.group_ended(0)
        assert not enum.group_ended(1)
        assert next(units).payload == ('B', 1)

    def test_page_below_first_page_is_clamped(self):
        unit = next(RegionPageEnumeration(['A']).units({'currentRegion': 0, 'currentPage': 0}))
        assert unit.payload == ('A', 1)

    def test_region_names(self):
        regions = [{'name': 'Seoul', 'value': '11'}]
        unit = next(RegionPageEnumeration(regions, name=lambda r: r['name']).units())
        assert unit.label == 'Seoul page 1'
        assert unit.payload == (regions[0], 1)

    def test_ungrouped_strategies_ignore_end_group(self):
        enum = PageEnumeration(max_page=2)
        enum.end_group(0)
        assert not enum.group_ended(0)
        assert [u.group for u in enum.units()] == [None, None]
