"""Tests for FilterService and TaskFilter."""

import pytest

from linear_tracker.models import TaskStatus, UnifiedTask
from linear_tracker.services import FilterService, TaskFilter


@pytest.fixture
def filter_service() -> FilterService:
    """Create a FilterService instance."""
    return FilterService()


@pytest.fixture
def tasks() -> list[UnifiedTask]:
    """Five tasks covering statuses, labels, priorities and types."""
    return [
        UnifiedTask(
            id="t1",
            title="ENG-1: Open urgent",
            status=TaskStatus.OPEN,
            priority=0,
            labels=["urgent", "backend"],
            assignee="ada@example.com",
        ),
        UnifiedTask(
            id="t2",
            title="ENG-2: In progress urgent",
            status=TaskStatus.IN_PROGRESS,
            priority=1,
            labels=["urgent"],
            parent_id="epic-1",
        ),
        UnifiedTask(
            id="t3",
            title="ENG-3: Done urgent",
            status=TaskStatus.COMPLETED,
            priority=2,
            labels=["urgent"],
        ),
        UnifiedTask(
            id="t4",
            title="ENG-4: Open not urgent",
            status=TaskStatus.OPEN,
            priority=3,
            labels=["backend"],
            parent_id="epic-1",
            depends_on=["t2"],
        ),
        UnifiedTask(
            id="t5",
            title="ENG-5: Epic",
            status=TaskStatus.OPEN,
            priority=2,
            labels=["Epic"],
            type="epic",
        ),
    ]


def _ids(tasks: list[UnifiedTask]) -> list[str]:
    return [t.id for t in tasks]


class TestTaskFilter:
    """Tests for TaskFilter construction."""

    def test_defaults_are_empty(self):
        """A default filter has no criteria."""
        f = TaskFilter()
        assert f.status == []
        assert f.labels == []
        assert f.priority == []
        assert f.ready is False
        assert f.limit is None

    def test_scalars_normalized_to_lists(self):
        """Single values are wrapped in lists."""
        f = TaskFilter(status="open", priority=1, type="epic", labels="urgent")
        assert f.status == [TaskStatus.OPEN]
        assert f.priority == [1]
        assert f.type == ["epic"]
        assert f.labels == ["urgent"]

    def test_invalid_status_rejected(self):
        """Unknown statuses are rejected at construction."""
        with pytest.raises(ValueError):
            TaskFilter(status=["paused"])

    def test_out_of_range_priority_rejected(self):
        """Priorities outside 0..4 are rejected."""
        with pytest.raises(ValueError, match="Priority"):
            TaskFilter(priority=[5])

    def test_negative_pagination_rejected(self):
        """limit and offset cannot be negative."""
        with pytest.raises(ValueError, match="limit"):
            TaskFilter(limit=-1)
        with pytest.raises(ValueError, match="offset"):
            TaskFilter(offset=-1)


class TestFilterApply:
    """Tests for FilterService.apply."""

    def test_no_filter_returns_all(self, filter_service, tasks):
        """Without a filter every task is returned in order."""
        assert _ids(filter_service.apply(tasks)) == ["t1", "t2", "t3", "t4", "t5"]

    def test_status_any_match(self, filter_service, tasks):
        """Status list is ORed."""
        f = TaskFilter(status=[TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED])
        assert _ids(filter_service.apply(tasks, f)) == ["t2", "t3"]

    def test_status_and_label_combined(self, filter_service, tasks):
        """(open OR in_progress) AND labelled urgent."""
        f = TaskFilter(status=["open", "in_progress"], labels=["urgent"])
        assert _ids(filter_service.apply(tasks, f)) == ["t1", "t2"]

    def test_labels_require_all(self, filter_service, tasks):
        """Every listed label must be present."""
        f = TaskFilter(labels=["urgent", "backend"])
        assert _ids(filter_service.apply(tasks, f)) == ["t1"]

    def test_labels_are_case_sensitive(self, filter_service, tasks):
        """Label matching is exact."""
        f = TaskFilter(labels=["epic"])
        assert filter_service.apply(tasks, f) == []

    def test_priority_any_match(self, filter_service, tasks):
        """Priority list is ORed."""
        f = TaskFilter(priority=[0, 3])
        assert _ids(filter_service.apply(tasks, f)) == ["t1", "t4"]

    def test_parent_and_assignee(self, filter_service, tasks):
        """parent_id and assignee match exactly."""
        assert _ids(filter_service.apply(tasks, TaskFilter(parent_id="epic-1"))) == ["t2", "t4"]
        f = TaskFilter(assignee="ada@example.com")
        assert _ids(filter_service.apply(tasks, f)) == ["t1"]

    def test_type(self, filter_service, tasks):
        """Type filter selects epics."""
        assert _ids(filter_service.apply(tasks, TaskFilter(type="epic"))) == ["t5"]

    def test_exclude_ids(self, filter_service, tasks):
        """Excluded ids are removed after other criteria."""
        f = TaskFilter(status="open", exclude_ids=["t1", "t5"])
        assert _ids(filter_service.apply(tasks, f)) == ["t4"]

    def test_ready_uses_full_collection(self, filter_service, tasks):
        """Readiness checks dependencies against all tasks, not the filtered subset."""
        # t2 (a dependency of t4) is filtered out by status but still blocks t4
        f = TaskFilter(status="open", ready=True)
        assert _ids(filter_service.apply(tasks, f)) == ["t1", "t5"]

    def test_offset_then_limit(self, filter_service, tasks):
        """Pagination slices the filtered result."""
        f = TaskFilter(status="open", offset=1, limit=1)
        assert _ids(filter_service.apply(tasks, f)) == ["t4"]

    def test_pagination_after_exclusion(self, filter_service, tasks):
        """offset counts only tasks that survived exclusion."""
        f = TaskFilter(exclude_ids=["t1", "t2"], limit=2)
        assert _ids(filter_service.apply(tasks, f)) == ["t3", "t4"]

    def test_zero_limit_means_unlimited(self, filter_service, tasks):
        """limit=0 is treated as no limit."""
        assert len(filter_service.apply(tasks, TaskFilter(limit=0))) == 5
