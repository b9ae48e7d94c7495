"""
Unit tests for BlockedDayService conflict checking.
"""

from datetime import date, time

import pytest
from fastapi import HTTPException

from models import Appointment, BlockedDay
from services.blocked_day_service import BlockedDayService
from tests.factories import (
    create_appointment, create_organization, create_patient, create_professional,
)


@pytest.fixture
def clinic(db_session):
    organization = create_organization(db_session)
    professional = create_professional(db_session, organization)
    patient = create_patient(db_session, organization)
    return organization, professional, patient


class TestFindConflicts:

    def test_appointment_inside_range_conflicts(self, db_session, clinic):
        organization, professional, patient = clinic
        appointment = create_appointment(db_session, organization, patient, professional, on=date(2026, 3, 3))

        conflicts = BlockedDayService.find_conflicts(
            db_session, organization.id, professional.id, date(2026, 3, 1), date(2026, 3, 5)
        )

        assert [a.id for a in conflicts] == [appointment.id]

    def test_range_bounds_are_inclusive(self, db_session, clinic):
        organization, professional, patient = clinic
        first = create_appointment(db_session, organization, patient, professional, on=date(2026, 3, 1), at=time(0, 0))
        last = create_appointment(db_session, organization, patient, professional, on=date(2026, 3, 5), at=time(23, 30))
        create_appointment(db_session, organization, patient, professional, on=date(2026, 3, 6), at=time(0, 0))
        create_appointment(db_session, organization, patient, professional, on=date(2026, 2, 28), at=time(23, 30))

        conflicts = BlockedDayService.find_conflicts(
            db_session, organization.id, professional.id, date(2026, 3, 1), date(2026, 3, 5)
        )

        assert [a.id for a in conflicts] == [first.id, last.id]

    @pytest.mark.parametrize("status", ["cancelado", "faltou"])
    def test_cancelled_and_no_show_are_ignored(self, db_session, clinic, status):
        organization, professional, patient = clinic
        create_appointment(db_session, organization, patient, professional, on=date(2026, 3, 3), status=status)

        conflicts = BlockedDayService.find_conflicts(
            db_session, organization.id, professional.id, date(2026, 3, 1), date(2026, 3, 5)
        )

        assert conflicts == []

    def test_other_professionals_do_not_conflict(self, db_session, clinic):
        organization, professional, patient = clinic
        colleague = create_professional(db_session, organization, name="Dr. Bruno")
        create_appointment(db_session, organization, patient, colleague, on=date(2026, 3, 3))

        conflicts = BlockedDayService.find_conflicts(
            db_session, organization.id, professional.id, date(2026, 3, 1), date(2026, 3, 5)
        )

        assert conflicts == []

    def test_conflicts_ordered_by_start_time(self, db_session, clinic):
        organization, professional, patient = clinic
        later = create_appointment(db_session, organization, patient, professional, on=date(2026, 3, 4), at=time(9, 0))
        earlier = create_appointment(db_session, organization, patient, professional, on=date(2026, 3, 2), at=time(15, 0))

        conflicts = BlockedDayService.find_conflicts(
            db_session, organization.id, professional.id, date(2026, 3, 1), date(2026, 3, 5)
        )

        assert [a.id for a in conflicts] == [earlier.id, later.id]


class TestCreateBlockedDay:

    def test_conflicts_without_confirmation_insert_nothing(self, db_session, clinic):
        organization, professional, patient = clinic
        create_appointment(db_session, organization, patient, professional, on=date(2026, 3, 3))

        result = BlockedDayService.create_blocked_day(
            db_session, organization.id, professional.id, date(2026, 3, 1), date(2026, 3, 5), "Férias"
        )

        assert not result.created
        assert len(result.conflicts) == 1
        assert db_session.query(BlockedDay).count() == 0

    def test_confirmed_conflicts_insert_and_leave_appointments(self, db_session, clinic):
        organization, professional, patient = clinic
        appointment = create_appointment(db_session, organization, patient, professional, on=date(2026, 3, 3))

        result = BlockedDayService.create_blocked_day(
            db_session, organization.id, professional.id, date(2026, 3, 1), date(2026, 3, 5), "Férias",
            confirm_conflicts=True
        )

        assert result.created
        assert result.blocked_day.start_date == date(2026, 3, 1)
        assert result.blocked_day.end_date == date(2026, 3, 5)
        db_session.expire_all()
        assert db_session.get(Appointment, appointment.id).status == "agendado"

    def test_no_conflicts_inserts(self, db_session, clinic):
        organization, professional, _ = clinic

        result = BlockedDayService.create_blocked_day(
            db_session, organization.id, professional.id, date(2026, 3, 1), date(2026, 3, 1), "Congresso"
        )

        assert result.created
        assert result.conflicts == []
        assert db_session.query(BlockedDay).count() == 1

    def test_inverted_range_rejected(self, db_session, clinic):
        organization, professional, _ = clinic

        with pytest.raises(HTTPException) as exc_info:
            BlockedDayService.create_blocked_day(
                db_session, organization.id, professional.id, date(2026, 3, 5), date(2026, 3, 1), "Férias"
            )

        assert exc_info.value.status_code == 400

    def test_professional_from_other_organization_not_found(self, db_session, clinic):
        organization, _, _ = clinic
        other_org = create_organization(db_session, name="Outra Clínica")
        stranger = create_professional(db_session, other_org)

        with pytest.raises(HTTPException) as exc_info:
            BlockedDayService.create_blocked_day(
                db_session, organization.id, stranger.id, date(2026, 3, 1), date(2026, 3, 5), "Férias"
            )

        assert exc_info.value.status_code == 404


class TestListBlockedDays:

    def test_overlap_filter(self, db_session, clinic):
        organization, professional, _ = clinic
        for start, end in [
            (date(2026, 2, 20), date(2026, 3, 2)),   # overlaps start
            (date(2026, 3, 10), date(2026, 3, 12)),  # inside
            (date(2026, 3, 30), date(2026, 4, 2)),   # overlaps end
            (date(2026, 4, 5), date(2026, 4, 6)),    # after
        ]:
            BlockedDayService.create_blocked_day(db_session, organization.id, professional.id, start, end, "x")

        rows = BlockedDayService.list_blocked_days(
            db_session, organization.id, start_date=date(2026, 3, 1), end_date=date(2026, 3, 31)
        )

        assert [r.start_date for r in rows] == [date(2026, 2, 20), date(2026, 3, 10), date(2026, 3, 30)]

    def test_single_bound(self, db_session, clinic):
        organization, professional, _ = clinic
        BlockedDayService.create_blocked_day(db_session, organization.id, professional.id, date(2026, 1, 1), date(2026, 1, 2), "x")
        BlockedDayService.create_blocked_day(db_session, organization.id, professional.id, date(2026, 6, 1), date(2026, 6, 2), "y")

        rows = BlockedDayService.list_blocked_days(db_session, organization.id, start_date=date(2026, 3, 1))

        assert [r.reason for r in rows] == ["y"]

    def test_scoped_to_organization(self, db_session, clinic):
        organization, professional, _ = clinic
        other_org = create_organization(db_session, name="Outra Clínica")
        other_professional = create_professional(db_session, other_org)
        BlockedDayService.create_blocked_day(db_session, organization.id, professional.id, date(2026, 1, 1), date(2026, 1, 2), "mine")
        BlockedDayService.create_blocked_day(db_session, other_org.id, other_professional.id, date(2026, 1, 1), date(2026, 1, 2), "theirs")

        rows = BlockedDayService.list_blocked_days(db_session, organization.id)

        assert [r.reason for r in rows] == ["mine"]
