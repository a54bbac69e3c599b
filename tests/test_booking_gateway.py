"""
Tests for booking persistence: commit ordering, notifications and patches.
"""

from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from conftest import NEXT_MONDAY, FailingNotifier, RecordingNotifier, add_kart
from app.models.booking import Booking
from app.models.kart import Kart
from app.services import errors
from app.services.booking_builder import BookingDraft, Customer, PricedSelection
from app.services.booking_gateway import BookingGateway
from app.services.errors import BookingNotFound, BookingRejected, KartNotFound


def _draft(kart_id, quantity=1, price="25", slot="09:00-09:30"):
    selections = [PricedSelection(kart_id=kart_id, quantity=quantity, price_per_slot=Decimal(price), timeslot=slot)]
    return BookingDraft(
        customer=Customer(name="Mari", email="mari@example.com", phone="5551234"),
        date=NEXT_MONDAY,
        start_time=slot.split("-")[0],
        end_time=slot.split("-")[1],
        duration=30,
        selected_timeslots=[slot],
        selections=selections,
        timeslot_kart_selections={slot: [kart_id]},
        timeslot_kart_quantities={slot: {kart_id: quantity}},
        total_price=quantity * Decimal(price),
    )


@pytest.fixture
def kart_id(session_factory):
    return add_kart(session_factory, quantity=2, price="25")


class TestCreate:

    def test_stores_and_confirms(self, session_factory, kart_id):
        notifier = RecordingNotifier()
        db = session_factory()
        booking = BookingGateway(db, notifier).create(_draft(kart_id, 2))
        db.close()

        assert notifier.confirmations == [booking.id]
        check = session_factory()
        stored = check.get(Booking, booking.id)
        assert stored.email_sent is True
        assert stored.status == "confirmed"
        assert stored.total_price == Decimal("50")
        assert [(s.kart_id, s.quantity, s.timeslot) for s in stored.kart_selections] == [(kart_id, 2, "09:00-09:30")]
        check.close()

    def test_booking_committed_before_notifier_runs(self, session_factory, kart_id):
        seen = {}

        class CheckingNotifier(RecordingNotifier):
            def send_booking_confirmation(self, booking, settings_row):
                other = session_factory()
                seen["stored"] = other.get(Booking, booking.id) is not None
                other.close()
                return True

        db = session_factory()
        BookingGateway(db, CheckingNotifier()).create(_draft(kart_id))
        db.close()
        assert seen["stored"] is True

    def test_notifier_failure_keeps_booking(self, session_factory, kart_id, caplog):
        db = session_factory()
        booking = BookingGateway(db, FailingNotifier()).create(_draft(kart_id))
        db.close()

        check = session_factory()
        stored = check.get(Booking, booking.id)
        assert stored is not None
        assert stored.email_sent is False
        check.close()
        assert "confirmation email failed" in caplog.text

    def test_failed_email_flag_write_still_returns_booking(self, session_factory, kart_id, monkeypatch, caplog):
        """The booking commit succeeds, the later email_sent update hits a locked database."""
        db = session_factory()
        real_commit = db.commit
        calls = []

        def commit():
            calls.append(1)
            if len(calls) == 2:
                raise OperationalError("UPDATE bookings", {}, Exception("database is locked"))
            real_commit()

        monkeypatch.setattr(db, "commit", commit)
        notifier = RecordingNotifier()
        booking = BookingGateway(db, notifier).create(_draft(kart_id))
        db.close()

        assert notifier.confirmations == [booking.id]
        assert booking.customer_name == "Mari"
        assert booking.email_sent is False
        assert "email_sent was not saved" in caplog.text

        check = session_factory()
        stored = check.get(Booking, booking.id)
        assert stored is not None
        assert stored.email_sent is False
        check.close()

    def test_without_notifier(self, session_factory, kart_id):
        db = session_factory()
        booking = BookingGateway(db).create(_draft(kart_id))
        assert booking.email_sent is False
        db.close()


class TestUpdate:

    @pytest.fixture
    def booking_id(self, session_factory, kart_id):
        db = session_factory()
        booking = BookingGateway(db).create(_draft(kart_id, 1))
        db.close()
        return booking.id

    def test_customer_fields(self, session_factory, booking_id):
        db = session_factory()
        booking = BookingGateway(db).update(booking_id, {"customer_name": "Jaan", "notes": "birthday"})
        assert (booking.customer_name, booking.notes) == ("Jaan", "birthday")
        assert booking.total_price == Decimal("25")
        db.close()

    def test_price_snapshot_survives_kart_price_change(self, session_factory, kart_id, booking_id):
        db = session_factory()
        db.get(Kart, kart_id).price_per_slot = Decimal("40")
        db.commit()

        booking = BookingGateway(db).update(booking_id, {"kart_selections": [{"kart_id": kart_id, "quantity": 2, "timeslot": "09:00-09:30"}]})
        assert booking.total_price == Decimal("50")
        assert booking.timeslot_kart_quantities == {"09:00-09:30": {kart_id: 2}}
        db.close()

    def test_new_selection_uses_current_price(self, session_factory, booking_id):
        other = add_kart(session_factory, name="Child", quantity=3, price="20")
        db = session_factory()
        booking = BookingGateway(db).update(booking_id, {"kart_selections": [{"kart_id": other, "quantity": 1, "timeslot": "9:00-9:30"}]})
        assert booking.total_price == Decimal("20")
        assert booking.kart_selections[0].timeslot == "09:00-09:30"
        db.close()

    def test_explicit_price(self, session_factory, kart_id, booking_id):
        db = session_factory()
        booking = BookingGateway(db).update(
            booking_id, {"kart_selections": [{"kart_id": kart_id, "quantity": 1, "price_per_slot": Decimal("10"), "timeslot": "09:00-09:30"}]}
        )
        assert booking.total_price == Decimal("10")
        db.close()

    def test_unknown_kart(self, session_factory, booking_id):
        db = session_factory()
        with pytest.raises(KartNotFound):
            BookingGateway(db).update(booking_id, {"kart_selections": [{"kart_id": "missing", "quantity": 1}]})
        db.close()

    def test_quantity_above_stock(self, session_factory, kart_id, booking_id):
        db = session_factory()
        with pytest.raises(BookingRejected) as exc:
            BookingGateway(db).update(booking_id, {"kart_selections": [{"kart_id": kart_id, "quantity": 3}]})
        assert exc.value.reason == errors.INSUFFICIENT_INVENTORY
        db.close()

    def test_cancellation_notifies_once(self, session_factory, booking_id):
        notifier = RecordingNotifier()
        db = session_factory()
        gateway = BookingGateway(db, notifier)
        gateway.update(booking_id, {"status": "cancelled"})
        gateway.update(booking_id, {"status": "cancelled"})
        db.close()
        assert notifier.cancellations == [booking_id]

    def test_cancellation_email_failure_is_not_fatal(self, session_factory, booking_id):
        db = session_factory()
        booking = BookingGateway(db, FailingNotifier()).update(booking_id, {"status": "cancelled"})
        assert booking.status == "cancelled"
        db.close()

    def test_missing_booking(self, session_factory):
        db = session_factory()
        with pytest.raises(BookingNotFound):
            BookingGateway(db).update("nope", {"status": "confirmed"})
        db.close()


class TestDeleteAndList:

    def test_delete_removes_selections(self, session_factory, kart_id):
        db = session_factory()
        gateway = BookingGateway(db)
        booking = gateway.create(_draft(kart_id))
        gateway.delete(booking.id)
        with pytest.raises(BookingNotFound):
            gateway.get(booking.id)
        assert gateway.day_bookings(NEXT_MONDAY) == []
        db.close()

    def test_delete_missing(self, session_factory):
        db = session_factory()
        with pytest.raises(BookingNotFound):
            BookingGateway(db).delete("nope")
        db.close()

    def test_list_filters(self, session_factory, kart_id):
        db = session_factory()
        gateway = BookingGateway(db)
        first = gateway.create(_draft(kart_id, slot="10:00-10:30"))
        second = gateway.create(_draft(kart_id, slot="09:00-09:30"))
        gateway.update(first.id, {"status": "cancelled"})

        assert [b.id for b in gateway.list(start_date=NEXT_MONDAY, end_date=NEXT_MONDAY)] == [second.id, first.id]
        assert [b.id for b in gateway.list(status="cancelled")] == [first.id]
        assert [b.id for b in gateway.day_bookings(NEXT_MONDAY)] == [second.id]
        db.close()
