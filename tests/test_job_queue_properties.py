"""
Property-based tests for the job model, queue lifecycle and connection budget.
"""

from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta

import pytest
from hypothesis import given, strategies as st

from dead_link_monitor.concurrent.job_queue import JobQueue
from dead_link_monitor.concurrent.models import ConnectionBudget, Job, JobStatus, is_absolute_url
from dead_link_monitor.utils.errors import QueueClosedError, ValidationError


@st.composite
def job_strategy(draw):
    """Generate a job with an absolute URL."""
    host = draw(st.text(alphabet="abcdefghijklmnopqrstuvwxyz", min_size=1, max_size=12))
    path = draw(st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789/-_", max_size=20))
    scheme = draw(st.sampled_from(["http", "https"]))
    document = draw(st.sampled_from(["a.md", "b.html", "docs/c.md"]))
    return Job(document=document, url=f"{scheme}://{host}.test/{path}")


class TestJobQueueOrdering:
    """FIFO order and the one-way close transition."""

    @given(jobs=st.lists(job_strategy(), max_size=30))
    def test_jobs_come_out_in_emission_order(self, jobs):
        queue = JobQueue()
        for job in jobs:
            queue.emit(job)

        drained = []
        while True:
            job = queue.next()
            if job is None:
                break
            drained.append(job)

        assert [id(job) for job in drained] == [id(job) for job in jobs]
        assert queue.emitted == len(jobs)

    @given(jobs=st.lists(job_strategy(), max_size=10))
    def test_closed_queue_rejects_emission_but_still_drains(self, jobs):
        queue = JobQueue()
        for job in jobs:
            queue.emit(job)
        queue.close()

        with pytest.raises(QueueClosedError):
            queue.emit(Job(document="late.md", url="https://late.test/"))

        assert len(queue) == len(jobs)
        for _ in jobs:
            assert queue.next() is not None
        assert queue.is_exhausted

    def test_exhausted_queue_stays_exhausted(self):
        queue = JobQueue()
        queue.close()
        queue.close()

        assert queue.is_exhausted
        assert queue.next() is None
        with pytest.raises(QueueClosedError):
            queue.emit(Job(document="a.md", url="https://a.test/"))
        assert queue.is_exhausted

    def test_open_empty_queue_is_not_exhausted(self):
        queue = JobQueue()
        assert queue.is_open
        assert len(queue) == 0
        assert not queue.is_exhausted


class TestJobModel:
    """URL validation and timestamp ordering."""

    @pytest.mark.parametrize("url", [
        "/relative/path",
        "page.html",
        "mailto:someone@example.com",
        "ftp://files.test/x",
        "https://",
        "http://[::1",
    ])
    def test_non_absolute_urls_are_rejected(self, url):
        assert not is_absolute_url(url)
        with pytest.raises(ValidationError):
            Job(document="a.md", url=url)

    def test_timestamps_are_ordered_through_lifecycle(self):
        job = Job(document="a.md", url="https://a.test/")
        assert job.status is JobStatus.PENDING

        job.mark_dispatched()
        assert job.status is JobStatus.DISPATCHED

        job.mark_completed()
        assert job.status is JobStatus.COMPLETED
        assert job.discovered_at <= job.dispatched_at <= job.completed_at
        assert job.get_fetch_time() >= 0

    def test_stamps_never_move_backwards(self):
        job = Job(document="a.md", url="https://a.test/")
        earlier = job.discovered_at - timedelta(seconds=5)

        job.mark_dispatched(earlier)
        job.mark_completed(earlier)

        assert job.dispatched_at == job.discovered_at
        assert job.completed_at == job.dispatched_at

    def test_completion_requires_dispatch(self):
        job = Job(document="a.md", url="https://a.test/")
        with pytest.raises(ValidationError):
            job.mark_completed()

    @pytest.mark.parametrize("name,value", [("url", "https://other.test/"), ("document", "other.md")])
    def test_identity_fields_are_read_only(self, name, value):
        job = Job(document="a.md", url="https://a.test/")

        with pytest.raises(FrozenInstanceError):
            setattr(job, name, value)

        assert (job.document, job.url) == ("a.md", "https://a.test/")
        job.mark_dispatched()
        assert job.dispatched_at is not None

    def test_double_dispatch_is_rejected(self):
        job = Job(document="a.md", url="https://a.test/", discovered_at=datetime(2024, 1, 1))
        job.mark_dispatched()
        with pytest.raises(ValidationError):
            job.mark_dispatched()


class TestConnectionBudget:
    """0 <= active <= max at all times."""

    @given(
        max_connections=st.integers(min_value=1, max_value=16),
        operations=st.lists(st.booleans(), max_size=60)
    )
    def test_active_stays_within_bounds(self, max_connections, operations):
        budget = ConnectionBudget(max_connections)

        for acquire in operations:
            if acquire:
                if budget.available > 0:
                    budget.acquire()
                else:
                    with pytest.raises(ValidationError):
                        budget.acquire()
            else:
                if budget.active > 0:
                    budget.release()
                else:
                    with pytest.raises(ValidationError):
                        budget.release()

            assert 0 <= budget.active <= budget.max_connections
            assert budget.available == budget.max_connections - budget.active

        assert budget.peak <= max_connections

    @pytest.mark.parametrize("value", [0, -1])
    def test_budget_requires_positive_maximum(self, value):
        with pytest.raises(ValidationError):
            ConnectionBudget(value)
