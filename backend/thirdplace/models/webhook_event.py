"""Event types that can be delivered to webhook configurations."""

from enum import Enum


class WebhookEventType(str, Enum):
    USER_JOINED_PLATFORM = "user.joined_platform"
    USER_JOINED_COMMUNITY = "user.joined_community"
    USER_REGISTERED_EVENT = "user.registered_event"
    USER_CANCELLED_REGISTRATION = "user.cancelled_registration"
    USER_POSTED_COMMENT = "user.posted_comment"
    USER_FLAGGED_COMMENT = "user.flagged_comment"
    USER_REFERRED_USER = "user.referred_user"
    DISCUSSION_AUTO_CLOSED = "discussion.auto_closed"
    DISCUSSION_EXTENDED = "discussion.extended"
    WEBHOOK_TEST = "webhook.test"


WEBHOOK_EVENT_TYPES = [event_type.value for event_type in WebhookEventType]
