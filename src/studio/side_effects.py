"""Best-effort side effects triggered by workflow transitions.

Notifications, audit records, calendar sync and emails are dispatched after
the primary state change has been applied. A failure here is logged and
dropped: it never propagates to the caller and never reverts the
transition.
"""

from datetime import datetime

import structlog
from protean.utils.globals import current_domain

from studio.activity.activity import Activity, ActivityAction
from studio.calendar_sync import get_calendar
from studio.mailer import get_email_sender
from studio.notification import get_notification_sink
from studio.notification.templates import get_template

logger = structlog.get_logger(__name__)


def notify(recipient_id: str | None, notification_type: str, context: dict) -> dict | None:
    """Render and publish a notification to one recipient."""
    if not recipient_id:
        return None
    try:
        rendered = get_template(notification_type).render(context)
        result = get_notification_sink().publish(
            recipient_id=str(recipient_id),
            notification_type=notification_type,
            subject=rendered["subject"],
            body=rendered["body"],
            context=context,
        )
    except Exception as exc:
        logger.error(
            "Notification dispatch failed",
            recipient_id=str(recipient_id),
            notification_type=notification_type,
            error=str(exc),
        )
        return None

    if result.get("status") != "sent":
        logger.warning(
            "Notification not delivered",
            recipient_id=str(recipient_id),
            notification_type=notification_type,
            error=result.get("error"),
        )
    return result


def record_activity(
    tenant_id: str,
    action: ActivityAction,
    title: str,
    job_id: str | None = None,
    order_id: str | None = None,
    actor_id: str | None = None,
    actor_role: str | None = None,
    description: str | None = None,
    details: dict | None = None,
) -> None:
    """Append an audit record for a transition."""
    try:
        activity = Activity.record(
            tenant_id=str(tenant_id),
            action=action,
            title=title,
            job_id=str(job_id) if job_id else None,
            order_id=str(order_id) if order_id else None,
            actor_id=str(actor_id) if actor_id else None,
            actor_role=actor_role,
            description=description,
            details=details,
        )
        current_domain.repository_for(Activity).add(activity)
    except Exception as exc:
        logger.error(
            "Activity recording failed",
            action=action.value,
            job_id=str(job_id) if job_id else None,
            order_id=str(order_id) if order_id else None,
            error=str(exc),
        )


def create_calendar_event(
    summary: str,
    start_time: datetime,
    duration_minutes: int,
    location: str | None = None,
    attendee_id: str | None = None,
) -> str | None:
    """Mirror an appointment to the calendar. Returns the event id, or None."""
    try:
        result = get_calendar().create_event(
            summary=summary,
            start_time=start_time,
            duration_minutes=duration_minutes,
            location=location,
            attendee_id=attendee_id,
        )
    except Exception as exc:
        logger.error("Calendar event creation failed", summary=summary, error=str(exc))
        return None

    if not result.get("event_id"):
        logger.warning("Calendar event not created", summary=summary, error=result.get("error"))
        return None
    return result["event_id"]


def update_calendar_event(event_id: str | None, start_time: datetime, duration_minutes: int) -> bool:
    if not event_id:
        return False
    try:
        result = get_calendar().update_event(event_id, start_time, duration_minutes)
    except Exception as exc:
        logger.error("Calendar event update failed", event_id=event_id, error=str(exc))
        return False

    if not result.get("updated"):
        logger.warning("Calendar event not updated", event_id=event_id, error=result.get("error"))
        return False
    return True


def delete_calendar_event(event_id: str | None) -> bool:
    if not event_id:
        return False
    try:
        result = get_calendar().delete_event(event_id)
    except Exception as exc:
        logger.error("Calendar event deletion failed", event_id=event_id, error=str(exc))
        return False

    if not result.get("deleted"):
        logger.warning("Calendar event not deleted", event_id=event_id, error=result.get("error"))
        return False
    return True


def send_email(to: str | None, subject: str, body: str) -> bool:
    if not to:
        return False
    try:
        result = get_email_sender().send(to=to, subject=subject, body=body)
    except Exception as exc:
        logger.error("Email dispatch failed", to=to, subject=subject, error=str(exc))
        return False

    if result.get("status") != "sent":
        logger.warning("Email not delivered", to=to, subject=subject, error=result.get("error"))
        return False
    return True
