from datetime import timedelta
from unittest.mock import patch

from django.test import TestCase, override_settings
from django.utils import timezone

from bookings.exceptions import (
    InvalidState,
    ReservationForbidden,
    ReservationNotFound,
    ReservationValidationError,
    ResourceUnavailable,
    SchedulingConflict,
)
from bookings import locks, services
from bookings.models import Reservation, ReservationHistory
from bookings.services import (
    AdminUpdate,
    OwnerUpdate,
    cancel_reservation,
    create_reservation,
    update_by_admin,
    update_by_owner,
)
from catalog.models import LifecycleState
from notifications.models import Notification

from .helpers import make_admin, make_resource, make_user, slot

Status = Reservation.Status
Action = ReservationHistory.Action


class EngineTestCase(TestCase):
    def setUp(self):
        self.user = make_user("ana")
        self.other = make_user("beto")
        self.admin = make_admin()
        self.resource = make_resource()

    def book(self, user=None, resource=None, start=None, end=None, **kwargs):
        if start is None:
            start, end = slot()
        with self.captureOnCommitCallbacks(execute=True):
            return create_reservation(
                user=user or self.user,
                resource_id=(resource or self.resource).pk,
                starts_at=start,
                ends_at=end,
                **kwargs,
            )


class CreateReservationTests(EngineTestCase):
    def test_create_records_history_and_notifies_creator_and_admins(self):
        reservation = self.book(comment="Reunión de equipo")

        self.assertEqual(reservation.status, Status.ACTIVE)
        self.assertEqual(reservation.comment, "Reunión de equipo")
        entries = list(reservation.history.values_list("action", "actor_id"))
        self.assertEqual(entries, [(Action.CREATED, self.user.pk)])
        recipients = set(
            Notification.objects.filter(category="reserva_creada").values_list("user_id", flat=True)
        )
        self.assertEqual(recipients, {self.user.pk, self.admin.pk})

    def test_back_to_back_reservations_both_succeed(self):
        start, _ = slot(hour=10)
        first = self.book(start=start, end=start + timedelta(hours=1))
        second = self.book(user=self.other, start=start + timedelta(hours=1), end=start + timedelta(hours=2))
        self.assertEqual({first.status, second.status}, {Status.ACTIVE})

    def test_overlap_is_rejected_with_conflicting_ids(self):
        start, end = slot(hour=10, hours=2)
        existing = self.book(start=start, end=end)

        with self.assertRaises(SchedulingConflict) as ctx:
            self.book(user=self.other, start=start + timedelta(hours=1), end=end + timedelta(hours=1))

        self.assertEqual([c["id"] for c in ctx.exception.conflicts], [existing.pk])
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(Reservation.objects.count(), 1)

    def test_past_start_is_rejected_and_nothing_persisted(self):
        start = timezone.now() - timedelta(hours=1)
        with self.assertRaises(ReservationValidationError) as ctx:
            self.book(start=start, end=start + timedelta(hours=2))
        self.assertIn("fecha_inicio", ctx.exception.errors)
        self.assertFalse(Reservation.objects.exists())
        self.assertFalse(Notification.objects.exists())

    def test_end_must_follow_start(self):
        start, _ = slot()
        with self.assertRaises(ReservationValidationError) as ctx:
            self.book(start=start, end=start)
        self.assertIn("fecha_fin", ctx.exception.errors)

    def test_comment_longer_than_limit_is_rejected(self):
        with self.assertRaises(ReservationValidationError) as ctx:
            self.book(comment="x" * 501)
        self.assertIn("comentarios", ctx.exception.errors)

    def test_unbookable_resources_are_rejected(self):
        inactive = make_resource("Inactiva", state=LifecycleState.INACTIVE)
        unavailable = make_resource("Sin disponibilidad", is_available=False)
        deleted = make_resource("Eliminada", state=LifecycleState.DELETED)
        for resource in (inactive, unavailable, deleted):
            with self.subTest(resource=resource.name):
                with self.assertRaises(ResourceUnavailable):
                    self.book(resource=resource)

        start, end = slot()
        with self.assertRaises(ResourceUnavailable):
            create_reservation(user=self.user, resource_id=999999, starts_at=start, ends_at=end)
        self.assertFalse(Reservation.objects.exists())
        self.assertNotIn(999999, locks._resource_locks)

    def test_cancelled_reservation_frees_the_interval(self):
        start, end = slot()
        first = self.book(start=start, end=end)
        with self.captureOnCommitCallbacks(execute=True):
            cancel_reservation(actor=self.user, reservation_id=first.pk)

        again = self.book(user=self.other, start=start, end=end)
        self.assertEqual(again.status, Status.ACTIVE)

    @override_settings(RESERVATIONS_SIDE_EFFECT_ATTEMPTS=2)
    def test_notification_failure_does_not_undo_the_reservation(self):
        with patch("notifications.services.send", side_effect=RuntimeError("bandeja caída")) as send:
            with self.assertLogs("bookings.services", level="ERROR"):
                reservation = self.book()

        self.assertTrue(Reservation.objects.filter(pk=reservation.pk, status=Status.ACTIVE).exists())
        self.assertTrue(reservation.history.filter(action=Action.CREATED).exists())
        # Dos envíos (creador y administradores), dos intentos cada uno.
        self.assertEqual(send.call_count, 4)


class OwnerUpdateTests(EngineTestCase):
    def test_owner_moves_reservation_and_admins_are_notified(self):
        reservation = self.book()
        start, end = slot(days=8, hour=15)

        with self.captureOnCommitCallbacks(execute=True):
            updated = update_by_owner(
                actor=self.user,
                reservation_id=reservation.pk,
                changes=OwnerUpdate(starts_at=start, ends_at=end),
            )

        self.assertEqual((updated.starts_at, updated.ends_at), (start, end))
        self.assertTrue(updated.history.filter(action=Action.UPDATED_BY_USER).exists())
        self.assertTrue(
            Notification.objects.filter(user=self.admin, category="reserva_actualizada").exists()
        )

    def test_own_interval_is_excluded_from_conflicts(self):
        start, end = slot(hour=10, hours=2)
        reservation = self.book(start=start, end=end)

        updated = update_by_owner(
            actor=self.user,
            reservation_id=reservation.pk,
            changes=OwnerUpdate(starts_at=start + timedelta(minutes=30), ends_at=end, comment="Más tarde"),
        )
        self.assertEqual(updated.comment, "Más tarde")

    def test_comment_is_kept_when_not_sent(self):
        reservation = self.book(comment="Original")
        start, end = slot(days=9)
        updated = update_by_owner(
            actor=self.user, reservation_id=reservation.pk, changes=OwnerUpdate(starts_at=start, ends_at=end)
        )
        self.assertEqual(updated.comment, "Original")

    def test_update_overlapping_another_reservation_fails(self):
        start, end = slot(hour=10)
        self.book(user=self.other, start=start, end=end)
        mine = self.book(start=end, end=end + timedelta(hours=1))

        with self.assertRaises(SchedulingConflict):
            update_by_owner(
                actor=self.user,
                reservation_id=mine.pk,
                changes=OwnerUpdate(starts_at=start + timedelta(minutes=30), ends_at=end + timedelta(minutes=30)),
            )
        mine.refresh_from_db()
        self.assertEqual(mine.starts_at, end)

    def test_cancelled_reservation_cannot_be_edited(self):
        reservation = self.book()
        cancel_reservation(actor=self.user, reservation_id=reservation.pk)
        start, end = slot(days=10)
        with self.assertRaises(InvalidState):
            update_by_owner(
                actor=self.user, reservation_id=reservation.pk, changes=OwnerUpdate(starts_at=start, ends_at=end)
            )

    def test_stranger_cannot_edit(self):
        reservation = self.book()
        start, end = slot(days=10)
        with self.assertRaises(ReservationForbidden):
            update_by_owner(
                actor=self.other, reservation_id=reservation.pk, changes=OwnerUpdate(starts_at=start, ends_at=end)
            )


class AdminUpdateTests(EngineTestCase):
    def test_admin_moves_reservation_to_another_resource(self):
        reservation = self.book()
        lab = make_resource("Laboratorio 2")

        with self.captureOnCommitCallbacks(execute=True):
            updated = update_by_admin(
                actor=self.admin, reservation_id=reservation.pk, changes=AdminUpdate(resource_id=lab.pk)
            )

        self.assertEqual(updated.resource_id, lab.pk)
        self.assertTrue(updated.history.filter(action=Action.UPDATED_BY_ADMIN, actor=self.admin).exists())
        self.assertTrue(Notification.objects.filter(user=self.user, category="reserva_actualizada").exists())

    def test_admin_move_into_busy_resource_conflicts(self):
        start, end = slot()
        lab = make_resource("Laboratorio 2")
        self.book(user=self.other, resource=lab, start=start, end=end)
        reservation = self.book(start=start, end=end)

        with self.assertRaises(SchedulingConflict):
            update_by_admin(actor=self.admin, reservation_id=reservation.pk, changes=AdminUpdate(resource_id=lab.pk))

    def test_admin_may_cancel_through_update(self):
        reservation = self.book()
        updated = update_by_admin(
            actor=self.admin, reservation_id=reservation.pk, changes=AdminUpdate(status=Status.CANCELLED)
        )
        self.assertEqual(updated.status, Status.CANCELLED)

    def test_admin_cannot_edit_terminal_reservation(self):
        reservation = self.book()
        cancel_reservation(actor=self.admin, reservation_id=reservation.pk)
        with self.assertRaises(InvalidState):
            update_by_admin(actor=self.admin, reservation_id=reservation.pk, changes=AdminUpdate(status=Status.ACTIVE))

    def test_non_admin_cannot_use_admin_update(self):
        reservation = self.book()
        with self.assertRaises(ReservationForbidden):
            update_by_admin(actor=self.user, reservation_id=reservation.pk, changes=AdminUpdate(comment="x"))


class ChangedBeforeLockTests(EngineTestCase):
    """Otra operación confirma cambios entre la lectura inicial y el bloqueo de la fila."""

    def change_before_lock(self, **fields):
        real_lock = services._lock_reservation
        calls = []

        def lock(reservation_id):
            if not calls:
                Reservation.objects.filter(pk=reservation_id).update(**fields)
            calls.append(reservation_id)
            return real_lock(reservation_id)

        return patch("bookings.services._lock_reservation", side_effect=lock)

    def test_owner_update_checks_the_resource_the_reservation_was_moved_to(self):
        lab = make_resource("Laboratorio 2")
        busy_start, busy_end = slot(hour=14)
        self.book(user=self.other, resource=lab, start=busy_start, end=busy_end)
        mine = self.book()

        with self.change_before_lock(resource=lab), self.assertRaises(SchedulingConflict):
            update_by_owner(
                actor=self.user,
                reservation_id=mine.pk,
                changes=OwnerUpdate(starts_at=busy_start, ends_at=busy_end),
            )

        overlapping = Reservation.objects.filter(
            resource=lab, status=Status.ACTIVE, starts_at__lt=busy_end, ends_at__gt=busy_start
        )
        self.assertEqual(overlapping.count(), 1)

    def test_owner_update_follows_a_move_to_a_free_resource(self):
        lab = make_resource("Laboratorio 2")
        mine = self.book()
        start, end = slot(days=8)

        with self.change_before_lock(resource=lab) as lock:
            updated = update_by_owner(
                actor=self.user, reservation_id=mine.pk, changes=OwnerUpdate(starts_at=start, ends_at=end)
            )

        self.assertEqual(lock.call_count, 2)
        self.assertEqual((updated.resource_id, updated.starts_at), (lab.pk, start))

    def test_admin_update_keeps_dates_changed_by_the_owner(self):
        reservation = self.book()
        start, end = slot(days=8, hour=16)

        with self.change_before_lock(starts_at=start, ends_at=end):
            update_by_admin(actor=self.admin, reservation_id=reservation.pk, changes=AdminUpdate(comment="Revisada"))

        reservation.refresh_from_db()
        self.assertEqual((reservation.starts_at, reservation.ends_at), (start, end))
        self.assertEqual(reservation.comment, "Revisada")

    def test_admin_date_change_keeps_resource_moved_by_another_admin(self):
        lab = make_resource("Laboratorio 2")
        reservation = self.book()
        start, end = slot(days=9)

        with self.change_before_lock(resource=lab):
            updated = update_by_admin(
                actor=self.admin, reservation_id=reservation.pk, changes=AdminUpdate(starts_at=start, ends_at=end)
            )

        self.assertEqual((updated.resource_id, updated.starts_at), (lab.pk, start))
        self.assertEqual(Reservation.objects.get(pk=reservation.pk).resource_id, lab.pk)


class CancelReservationTests(EngineTestCase):
    def test_owner_cancel_notifies_admins(self):
        reservation = self.book()
        with self.captureOnCommitCallbacks(execute=True):
            cancelled = cancel_reservation(actor=self.user, reservation_id=reservation.pk)

        self.assertEqual(cancelled.status, Status.CANCELLED)
        self.assertTrue(cancelled.history.filter(action=Action.CANCELLED_BY_USER).exists())
        self.assertTrue(Notification.objects.filter(user=self.admin, category="reserva_cancelada").exists())

    def test_admin_cancel_notifies_owner(self):
        reservation = self.book()
        with self.captureOnCommitCallbacks(execute=True):
            cancel_reservation(actor=self.admin, reservation_id=reservation.pk)

        self.assertTrue(reservation.history.filter(action=Action.CANCELLED_BY_ADMIN).exists())
        self.assertTrue(Notification.objects.filter(user=self.user, category="reserva_cancelada").exists())

    def test_cancelling_finalized_reservation_is_invalid(self):
        reservation = self.book()
        Reservation.objects.filter(pk=reservation.pk).update(status=Status.FINALIZED)

        with self.assertRaises(InvalidState) as ctx:
            cancel_reservation(actor=self.user, reservation_id=reservation.pk)

        self.assertEqual(ctx.exception.detail["estado"], Status.FINALIZED)
        reservation.refresh_from_db()
        self.assertEqual(reservation.status, Status.FINALIZED)

    def test_cancelling_twice_is_invalid(self):
        reservation = self.book()
        cancel_reservation(actor=self.user, reservation_id=reservation.pk)
        with self.assertRaises(InvalidState):
            cancel_reservation(actor=self.user, reservation_id=reservation.pk)

    def test_access_rules(self):
        reservation = self.book()
        with self.assertRaises(ReservationForbidden):
            cancel_reservation(actor=self.other, reservation_id=reservation.pk)
        with self.assertRaises(ReservationNotFound):
            cancel_reservation(actor=self.user, reservation_id=reservation.pk + 1000)
