"""Tests for the job runner event stream."""

import json

import pytest

from golf_scraper.errors import JobAlreadyRunningError, ScraperError, SetupError, UnknownJobError
from golf_scraper.job_runner import JobRunner, format_sse
from golf_scraper.models import JobOutcome, JobStatus

from fakes import ScriptedFetcher, make_job, make_pages


async def collect(runner, job_id):
    return [event async for event in runner.events(job_id)]


def test_format_sse():
    frame = format_sse('log', {'level': 'INFO', 'message': '페이지 1'})
    assert frame.startswith('event: log\ndata: ')
    assert frame.endswith('\n\n')
    assert json.loads(frame.split('data: ', 1)[1]) == {'level': 'INFO', 'message': '페이지 1'}


class TestJobRunner:

    @pytest.mark.asyncio
    async def test_completed_run_ends_with_end_event(self, controller):
        runner = JobRunner(controller, {'fake': make_job(ScriptedFetcher(make_pages(2)))})

        runner.start('fake')
        events = await collect(runner, 'fake')

        names = [name for name, _ in events]
        assert names[-1] == 'end'
        assert set(names[:-1]) == {'log'}
        assert events[-1][1]['outcome'] == 'completed'
        assert events[-1][1]['total_records'] == 6
        assert runner.status('fake') == JobStatus.IDLE

    @pytest.mark.asyncio
    async def test_stopped_run_ends_with_stop_event(self, controller):
        runner = None

        def stop_on_second(page):
            if page == 2:
                runner.request_stop('fake')

        runner = JobRunner(controller, {'fake': make_job(ScriptedFetcher(make_pages(5), on_fetch=stop_on_second))})
        runner.start('fake')
        events = await collect(runner, 'fake')

        assert events[-1][0] == 'stop'
        assert controller.checkpoints.read('fake') == {'currentPage': 3}

    @pytest.mark.asyncio
    async def test_setup_failure_is_an_error_event(self, controller):
        def missing(ctx):
            raise SetupError("input collection missing")

        job = make_job(ScriptedFetcher({}), enumeration_factory=missing)
        runner = JobRunner(controller, {'fake': job})

        runner.start('fake')
        events = await collect(runner, 'fake')

        assert events[-1] == ('error', {'message': 'input collection missing'})
        assert any(name == 'log' and data['level'] == 'ERROR' for name, data in events)

    @pytest.mark.asyncio
    async def test_second_start_is_rejected(self, controller):
        runner = JobRunner(controller, {'fake': make_job(ScriptedFetcher(make_pages(1)))})

        runner.start('fake')
        with pytest.raises(JobAlreadyRunningError):
            runner.start('fake')
        with pytest.raises(ScraperError):
            runner.reset_progress('fake')

        await collect(runner, 'fake')
        result = await runner.wait('fake')
        assert result.total_records == 3

    @pytest.mark.asyncio
    async def test_unknown_job(self, controller):
        runner = JobRunner(controller, {})
        with pytest.raises(UnknownJobError):
            runner.start('okgolf')
        with pytest.raises(UnknownJobError):
            runner.status('okgolf')

    def test_statuses_cover_catalogue(self, controller):
        runner = JobRunner(controller, {'a': make_job(ScriptedFetcher({}), job_id='a'),
                                        'b': make_job(ScriptedFetcher({}), job_id='b')})
        controller.status.begin('b')

        assert runner.statuses() == {'a': JobStatus.IDLE, 'b': JobStatus.RUNNING}
        assert runner.request_stop('a') is False
        assert runner.request_stop('b') is True

    def test_reset_progress(self, controller):
        runner = JobRunner(controller, {'fake': make_job(ScriptedFetcher({}))})
        controller.checkpoints.write('fake', {'currentPage': 9})

        runner.reset_progress('fake')

        assert not controller.checkpoints.exists('fake')

    @pytest.mark.asyncio
    async def test_closing_the_stream_stops_the_run(self, controller):
        fetcher = ScriptedFetcher(make_pages(50), pause=0.5)
        runner = JobRunner(controller, {'fake': make_job(fetcher)})

        runner.start('fake')
        stream = runner.events('fake', stop_on_close=True)
        name, _ = await stream.__anext__()
        await stream.aclose()
        result = await runner.wait('fake')

        assert name == 'log'
        assert result.outcome == JobOutcome.STOPPED
        assert len(fetcher.calls) < 50
        assert controller.checkpoints.exists('fake')
        assert runner.status('fake') == JobStatus.IDLE

    @pytest.mark.asyncio
    async def test_finished_stream_does_not_request_stop(self, controller):
        runner = JobRunner(controller, {'fake': make_job(ScriptedFetcher(make_pages(2)))})

        runner.start('fake')
        events = [event async for event in runner.events('fake', stop_on_close=True)]
        result = await runner.wait('fake')

        assert events[-1][0] == 'end'
        assert result.outcome == JobOutcome.COMPLETED
