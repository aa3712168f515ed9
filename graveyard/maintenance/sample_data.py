from __future__ import annotations

from datetime import datetime, timedelta

from graveyard.maintenance.models import MaintenanceTask, TaskCategory, TaskStatus


def sample_tasks(now: datetime) -> list[MaintenanceTask]:
    """Starter dataset used when nothing usable is stored yet."""
    today = now.date()
    day = timedelta(days=1)
    return [
        MaintenanceTask(
            id="1",
            plot_id="1",
            grave_id="1",
            title="Quarterly Grave Cleaning",
            description="Deep cleaning of headstone and surrounding area",
            category=TaskCategory.CLEANING,
            status=TaskStatus.SCHEDULED,
            assigned_to="2",
            assigned_by="1",
            scheduled_date=today + 2 * day,
            deadline=today + 5 * day,
            is_public=True,
            created_at=now,
            updated_at=now,
        ),
        MaintenanceTask(
            id="2",
            plot_id="1",
            grave_id="2",
            title="Landscaping Maintenance",
            description="Trim grass and remove weeds around grave site",
            category=TaskCategory.LANDSCAPING,
            status=TaskStatus.IN_PROGRESS,
            assigned_to="2",
            assigned_by="1",
            scheduled_date=today,
            deadline=today + day,
            is_public=True,
            created_at=now - 2 * day,
            updated_at=now,
        ),
        MaintenanceTask(
            id="3",
            plot_id="1",
            grave_id="3",
            title="Headstone Repair",
            description="Fix crack in headstone base",
            category=TaskCategory.REPAIR,
            status=TaskStatus.COMPLETED,
            assigned_to="2",
            assigned_by="1",
            scheduled_date=today - 10 * day,
            deadline=today - 5 * day,
            completed_date=today - 6 * day,
            completed_by="2",
            notes="Repair completed successfully. Used epoxy resin.",
            is_public=False,
            created_at=now - 15 * day,
            updated_at=now - 6 * day,
        ),
        MaintenanceTask(
            id="4",
            plot_id="2",
            grave_id="4",
            title="Winter Weather Inspection",
            description="Check for weather damage and debris",
            category=TaskCategory.INSPECTION,
            status=TaskStatus.OVERDUE,
            assigned_to="2",
            assigned_by="1",
            scheduled_date=today - 3 * day,
            deadline=today - day,
            is_public=False,
            created_at=now - 7 * day,
            updated_at=now - day,
        ),
    ]
