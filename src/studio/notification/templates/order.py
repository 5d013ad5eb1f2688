"""Order notification templates."""

from studio.notification.port import NotificationType


class OrderCreatedTemplate:
    notification_type = NotificationType.ORDER_CREATED.value

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        return {
            "subject": f"New order #{order_number}",
            "body": f"Order #{order_number} was created and is waiting for an editor.",
        }


class OrderAssignedTemplate:
    notification_type = NotificationType.ORDER_ASSIGNED.value

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        return {
            "subject": f"Order #{order_number} assigned to you",
            "body": f"You have been assigned order #{order_number}. Accept it to start editing.",
        }


class OrderAcceptedTemplate:
    notification_type = NotificationType.ORDER_ACCEPTED.value

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        return {
            "subject": f"Order #{order_number} accepted",
            "body": f"The editor accepted order #{order_number} and started processing.",
        }


class OrderDeclinedTemplate:
    notification_type = NotificationType.ORDER_DECLINED.value

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        reason = context.get("reason") or "No reason given"
        return {
            "subject": f"Order #{order_number} declined",
            "body": f"The editor declined order #{order_number}. The order was cancelled.\n\nReason: {reason}",
        }


class OrderCancelledTemplate:
    notification_type = NotificationType.ORDER_CANCELLED.value

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        return {
            "subject": f"Order #{order_number} cancelled",
            "body": f"Order #{order_number} was cancelled.",
        }


class OrderSubmittedTemplate:
    notification_type = NotificationType.ORDER_SUBMITTED.value

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        return {
            "subject": f"Order #{order_number} ready for review",
            "body": f"Edits for order #{order_number} were submitted and are waiting for QC.",
        }


class OrderCompletedTemplate:
    notification_type = NotificationType.ORDER_COMPLETED.value

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        return {
            "subject": f"Order #{order_number} approved",
            "body": f"Order #{order_number} passed QC and is complete.",
        }


class OrderRevisionRequestedTemplate:
    notification_type = NotificationType.ORDER_REVISION_REQUESTED.value

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        notes = context.get("notes", "")
        return {
            "subject": f"Revision requested for order #{order_number}",
            "body": f"A revision was requested for order #{order_number}.\n\nNotes: {notes}",
        }
