"""Tests for the apply_order_by sorting helper."""

from sqlalchemy.orm import Session

from tests.conftest import make_configuration, make_delivery
from thirdplace.core.sorting import apply_order_by
from thirdplace.models.webhook_configuration import WebhookConfiguration
from thirdplace.models.webhook_delivery import WebhookDelivery


def _names(db_session: Session, order_by, **kwargs):
    query = apply_order_by(
        db_session.query(WebhookConfiguration), WebhookConfiguration, order_by, **kwargs
    )
    return [config.name for config in query.all()]


class TestApplyOrderBy:
    def test_sort_by_valid_field_asc(self, db_session: Session):
        for name in ("Bravo", "Alpha", "Charlie"):
            make_configuration(db_session, name=name)
        assert _names(db_session, "name:asc") == ["Alpha", "Bravo", "Charlie"]

    def test_sort_by_valid_field_desc(self, db_session: Session):
        for name in ("Bravo", "Alpha", "Charlie"):
            make_configuration(db_session, name=name)
        assert _names(db_session, "name:desc") == ["Charlie", "Bravo", "Alpha"]

    def test_no_direction_defaults_to_asc(self, db_session: Session):
        for name in ("Bravo", "Alpha"):
            make_configuration(db_session, name=name)
        assert _names(db_session, "name") == ["Alpha", "Bravo"]

    def test_invalid_direction_sorts_ascending(self, db_session: Session):
        for name in ("Bravo", "Alpha"):
            make_configuration(db_session, name=name)
        assert _names(db_session, "name:sideways") == ["Alpha", "Bravo"]

    def test_custom_default_field(self, db_session: Session):
        for name in ("Bravo", "Alpha"):
            make_configuration(db_session, name=name)
        assert _names(db_session, None, default_field="name", default_direction="asc") == [
            "Alpha",
            "Bravo",
        ]

    def test_default_sort_created_at_desc(self, db_session: Session, active_config):
        old = make_delivery(db_session, active_config, age_seconds=30)
        new = make_delivery(db_session, active_config, age_seconds=1)

        query = apply_order_by(db_session.query(WebhookDelivery), WebhookDelivery, None)
        assert [d.id for d in query.all()] == [new.id, old.id]

    def test_invalid_field_falls_back_to_default(self, db_session: Session, active_config):
        old = make_delivery(db_session, active_config, age_seconds=30)
        new = make_delivery(db_session, active_config, age_seconds=1)

        query = apply_order_by(
            db_session.query(WebhookDelivery), WebhookDelivery, "no_such_column:asc"
        )
        assert [d.id for d in query.all()] == [new.id, old.id]

    def test_empty_string_uses_default(self, db_session: Session, active_config):
        old = make_delivery(db_session, active_config, age_seconds=30)
        new = make_delivery(db_session, active_config, age_seconds=1)

        query = apply_order_by(db_session.query(WebhookDelivery), WebhookDelivery, "")
        assert [d.id for d in query.all()] == [new.id, old.id]
