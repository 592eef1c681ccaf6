"""Tests for the result sinks."""

import json

from golf_scraper.result_sink import InMemoryResultSink, JsonResultSink


class TestInMemoryResultSink:

    def test_replace_and_load(self):
        sink = InMemoryResultSink()
        assert sink.load_all('okgolf') == []

        sink.append_or_replace('okgolf', [{'number': 1}])
        sink.append_or_replace('okgolf', [{'number': 1}, {'number': 2}])

        assert sink.load_all('okgolf') == [{'number': 1}, {'number': 2}]
        assert sink.writes == 2

    def test_returns_copies(self):
        sink = InMemoryResultSink()
        records = [{'number': 1}]
        sink.append_or_replace('okgolf', records)
        records[0]['number'] = 2
        sink.load_all('okgolf')[0]['number'] = 3
        assert sink.load_all('okgolf') == [{'number': 1}]


class TestJsonResultSink:

    def test_writes_pretty_utf8_json(self, tmp_path):
        sink = JsonResultSink(str(tmp_path))
        sink.append_or_replace('citeezon', [{'name': '골프존 강남점'}])

        text = sink.path_for('citeezon').read_text(encoding='utf-8')
        assert '골프존 강남점' in text
        assert json.loads(text) == [{'name': '골프존 강남점'}]
        assert sink.load_all('citeezon') == [{'name': '골프존 강남점'}]

    def test_missing_collection_is_empty(self, tmp_path):
        assert JsonResultSink(str(tmp_path)).load_all('citeezon') == []

    def test_corrupted_collection_is_backed_up(self, tmp_path):
        sink = JsonResultSink(str(tmp_path))
        sink.path_for('okgolf').write_text('[{"number": 1', encoding='utf-8')

        assert sink.load_all('okgolf') == []
        assert list(tmp_path.glob('okgolf.corrupted.*.json'))

    def test_non_list_collection_is_ignored(self, tmp_path):
        sink = JsonResultSink(str(tmp_path))
        sink.path_for('okgolf').write_text('{"number": 1}', encoding='utf-8')
        assert sink.load_all('okgolf') == []
