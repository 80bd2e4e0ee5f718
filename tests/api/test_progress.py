"""
Tests for Progress API Endpoints
"""

from datetime import UTC, datetime
from uuid import uuid4

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from factories import Org, add_session

ROWS = [
    {"module_name": "M1", "topic_name": "T1", "sub_topic_name": "A", "lecture_number": 1},
    {"module_name": "M1", "topic_name": "T1", "sub_topic_name": "B", "lecture_number": 2},
]


async def seed(client: AsyncClient, db_session: AsyncSession, org: Org) -> None:
    """Lecture 1 was due on 5 Jan; lecture 2 falls after today (10 Jan)."""
    for day, lecture in [(5, "1"), (14, "2")]:
        start = datetime(2026, 1, day, 4, 30, tzinfo=UTC)
        await add_session(db_session, org, start, start.replace(hour=5, minute=30), lecture)
    await client.put(f"/api/v1/curriculum/subjects/{org.subject.id}", json={"rows": ROWS})


class TestSubjectProgress:
    async def test_snapshot(self, client: AsyncClient, org: Org, db_session: AsyncSession):
        await seed(client, db_session, org)

        response = await client.get(f"/api/v1/progress/subjects/{org.subject.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["batch_code"] == "1SOT2024A"
        assert data["bucket"] == "on_track"
        assert data["snapshot"] == {
            "expected_completion_lecture": 1,
            "actual_completion_lecture": 0.0,
            "completion_lag": 1.0,
            "completion_percentage": 0,
            "punctuality_issue_count": 1,
            "punctuality_issue_percentage": 100.0,
            "has_curriculum_data": True,
        }

    async def test_unknown_subject(self, client: AsyncClient):
        response = await client.get(f"/api/v1/progress/subjects/{uuid4()}")

        assert response.status_code == 404


class TestDashboard:
    async def test_default_level_is_school(
        self, client: AsyncClient, org: Org, db_session: AsyncSession
    ):
        await seed(client, db_session, org)

        response = await client.get("/api/v1/progress/dashboard")

        assert response.status_code == 200
        data = response.json()
        assert data["level"] == "school"
        (unit,) = data["units"]
        assert unit["unit_name"] == "SOT"
        assert unit["total_subjects"] == 1
        assert unit["total_teachers"] == 1
        assert unit["on_track_subjects"] == 1
        assert unit["on_track"][0]["subject_name"] == "Data Structures"
        assert unit["teachers"] == [
            {
                "teacher_name": "Asha Rao",
                "subject_name": "Data Structures",
                "batch_code": "1SOT2024A",
            }
        ]

    async def test_invalid_dashboard_level(self, client: AsyncClient):
        response = await client.get("/api/v1/progress/dashboard", params={"level": "campus"})

        assert response.status_code == 422

    async def test_unit_summary(self, client: AsyncClient, org: Org, db_session: AsyncSession):
        await seed(client, db_session, org)

        response = await client.get(f"/api/v1/progress/division/{org.division.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["unit_name"] == "A"
        assert data["level"] == "division"
        assert data["average_progress_rate"] == 0

    async def test_unit_summary_bad_level(self, client: AsyncClient):
        response = await client.get(f"/api/v1/progress/campus/{uuid4()}")

        assert response.status_code == 400

    async def test_unit_summary_unknown_unit(self, client: AsyncClient, org: Org):
        response = await client.get(f"/api/v1/progress/center/{uuid4()}")

        assert response.status_code == 404
        assert "Center not found" in response.json()["detail"]


class TestDivisionWindow:
    async def test_window_counts(self, client: AsyncClient, org: Org, db_session: AsyncSession):
        await seed(client, db_session, org)

        response = await client.get(
            f"/api/v1/progress/divisions/{org.division.id}/window",
            params={"from": "2026-01-01", "to": "2026-01-10"},
        )

        assert response.status_code == 200
        data = response.json()
        assert (data["start"], data["end"]) == ("2026-01-01", "2026-01-10")
        assert data["subjects"] == [
            {
                "subject_id": str(org.subject.id),
                "subject_name": "Data Structures",
                "teacher_name": "Asha Rao",
                "expected_sub_topics": 1,
                "completed_sub_topics": 0,
                "completed_lectures": 0.0,
                "lectures_behind": 1.0,
            }
        ]

    async def test_window_outside_semester(self, client: AsyncClient, org: Org):
        response = await client.get(
            f"/api/v1/progress/divisions/{org.division.id}/window", params={"from": "2025-12-01"}
        )

        assert response.status_code == 400
        assert "semester's period" in response.json()["detail"]

    async def test_unknown_division(self, client: AsyncClient):
        response = await client.get(f"/api/v1/progress/divisions/{uuid4()}/window")

        assert response.status_code == 404

    async def test_lagging_subjects(self, client: AsyncClient, org: Org, db_session: AsyncSession):
        await seed(client, db_session, org)

        response = await client.get(f"/api/v1/progress/divisions/{org.division.id}/lagging")

        assert response.status_code == 200
        data = response.json()
        assert data["end"] == "2026-01-10"
        assert [s["subject_name"] for s in data["subjects"]] == ["Data Structures"]

    async def test_lagging_reversed_window(self, client: AsyncClient, org: Org):
        response = await client.get(
            f"/api/v1/progress/divisions/{org.division.id}/lagging",
            params={"from": "2026-01-08", "to": "2026-01-06"},
        )

        assert response.status_code == 400
