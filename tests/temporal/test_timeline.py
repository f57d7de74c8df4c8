"""Tests for timeline construction."""

from repo_historian.config import HistoryThresholds
from repo_historian.temporal.models import EventType
from repo_historian.temporal.timeline import build_timeline, commit_event, quiet_periods


class TestCommitEvent:
    """Test commit_event."""

    def test_plain_commit(self, make_commit):
        commit = make_commit(author="bob", message="Tweak parser\n\nLonger body")
        event = commit_event(commit)

        assert event.type == EventType.COMMIT
        assert event.description == "Tweak parser"
        assert event.author == "bob"
        assert event.date == commit.date
        assert event.files == ["src/app.py"]

    def test_refactor(self, make_commit):
        event = commit_event(make_commit(message="Refactor storage layer"))

        assert event.type == EventType.MAJOR_REFACTOR
        assert event.description == "Refactor: Refactor storage layer"

    def test_large_change_overrides_description(self, make_commit):
        files = tuple(f"f{i}.py" for i in range(11))
        event = commit_event(make_commit(files=files, message="refactor everything"))

        assert event.type == EventType.MAJOR_REFACTOR
        assert event.description == "Large change (11 files): refactor everything"

    def test_ten_files_is_not_large(self, make_commit):
        files = tuple(f"f{i}.py" for i in range(10))
        event = commit_event(make_commit(files=files, message="bump"))
        assert event.description == "bump"

    def test_files_are_capped(self, make_commit):
        files = tuple(f"f{i}.py" for i in range(8))
        event = commit_event(make_commit(files=files))
        assert event.files == ["f0.py", "f1.py", "f2.py", "f3.py", "f4.py"]


class TestQuietPeriods:
    """Test quiet_periods."""

    def test_gap_above_threshold(self, make_commit):
        newer, older = make_commit(days_ago=0), make_commit(days_ago=20.5)
        (event,) = quiet_periods([newer, older])

        assert event.type == EventType.QUIET_PERIOD
        assert event.date == older.date
        assert event.description == "20 day gap in development"
        assert event.files is None
        assert event.author is None

    def test_gap_at_threshold_is_ignored(self, make_commit):
        assert quiet_periods([make_commit(days_ago=0), make_commit(days_ago=14)]) == []

    def test_custom_threshold(self, make_commit):
        commits = [make_commit(days_ago=0), make_commit(days_ago=3)]
        assert len(quiet_periods(commits, HistoryThresholds(quiet_period_days=2))) == 1


class TestBuildTimeline:
    """Test build_timeline."""

    def test_empty(self):
        assert build_timeline([]) == []

    def test_merges_are_dropped(self, make_commit):
        commits = [
            make_commit(days_ago=1, message="Merge branch 'dev'"),
            make_commit(days_ago=2, message="work"),
        ]
        events = build_timeline(commits)

        assert [e.description for e in events] == ["work"]

    def test_filters_merges_before_taking_recent(self, make_commit):
        commits = [make_commit(days_ago=i * 0.1, message="Merge pull request") for i in range(5)]
        commits += [make_commit(days_ago=1 + i * 0.1, message=f"c{i}") for i in range(25)]
        events = build_timeline(commits)

        assert len(events) == 20
        assert all(e.type == EventType.COMMIT for e in events)
        assert events[0].description == "c0"

    def test_sorted_newest_first_with_quiet_periods(self, make_commit):
        commits = [
            make_commit(days_ago=0, message="latest"),
            make_commit(days_ago=30, message="middle"),
            make_commit(days_ago=31, message="oldest"),
        ]
        events = build_timeline(commits)

        assert [e.type for e in events] == [
            EventType.COMMIT,
            EventType.COMMIT,
            EventType.QUIET_PERIOD,
            EventType.COMMIT,
        ]
        assert events[2].description == "30 day gap in development"
        assert events[2].date == commits[1].date

    def test_quiet_periods_span_merges(self, make_commit):
        commits = [
            make_commit(days_ago=0, message="work"),
            make_commit(days_ago=20, message="Merge branch 'x'"),
        ]
        events = build_timeline(commits)

        assert [e.type for e in events] == [EventType.COMMIT, EventType.QUIET_PERIOD]
