from helpers import TODAY, YESTERDAY, FakeCache, run

from checkin.cache_config import checkin_cache_key
from checkin.schemas import AttendeeRegistration
from checkin.services.attendance import ALREADY_CHECKED_IN, AttendanceService
from checkin.services.result import ErrorKind


def _form(**overrides):
    data = {
        "first_name": " Maria ",
        "last_name": "Clara",
        "contact_number": "+639123456789",
        "school_name": "Rizal High",
        "barangay": "San Roque",
        "city": "Marikina",
        "gender": "Female",
    }
    data.update(overrides)
    return AttendeeRegistration(**data)


def test_registration_checks_in_and_assigns(store, cache, today):
    store.add_facilitator("fem", "Female")
    store.check_in_now("fem")

    result = run(AttendanceService(store, cache, today).register_and_check_in(_form()))

    assert result.is_success
    attendee = result.data
    assert attendee.first_name == "Maria"
    assert attendee.is_first_timer is True
    assert attendee.facilitator_id == "fem"
    assert store.attendees[attendee.id].facilitator_id == "fem"
    assert ("insert_attendance", attendee.id) in store.mutations
    assert cache.values[checkin_cache_key(attendee.id, TODAY)]


def test_registration_without_facilitators_stays_unassigned(store, today):
    result = run(AttendanceService(store, service_date=today).register_and_check_in(_form()))

    assert result.is_success
    assert result.data.facilitator_id is None


def test_invalid_registration_is_rejected_before_any_write(store, today):
    result = run(
        AttendanceService(store, service_date=today).register_and_check_in(_form(city=" "))
    )

    assert result.kind == ErrorKind.INVALID_ARGUMENT
    assert result.message == "City is required."
    assert store.mutations == []


def test_duplicate_contact_number(store, today):
    store.add_attendee("old", "Female", contact_number="+639123456789")

    result = run(AttendanceService(store, service_date=today).register_and_check_in(_form()))

    assert result.kind == ErrorKind.DUPLICATE_KEY
    assert "already registered" in result.message


def test_registration_partial_failure_keeps_attendee(store, today):
    store.fail("insert_attendance", ErrorKind.PERMISSION_DENIED, "denied")

    result = run(AttendanceService(store, service_date=today).register_and_check_in(_form()))

    assert result.is_failure
    assert result.partial is True
    assert result.message == "Attendee registered but check-in failed: denied"
    assert result.data.id in store.attendees
    assert result.error.details["failed_step"] == "check_in"


def test_optional_policy_stores_no_contact_number(store, today):
    service = AttendanceService(store, service_date=today, contact_number_policy="optional")

    result = run(service.register_and_check_in(_form(has_mobile_number=False, contact_number="")))

    assert result.is_success
    assert result.data.contact_number is None


def test_check_in_returning_attendee(store, cache, today):
    store.add_facilitator("fac")
    store.check_in_now("fac")
    store.add_attendee("att")

    result = run(AttendanceService(store, cache, today).check_in("att"))

    assert result.is_success
    assert result.data.facilitator_id == "fac"
    assert store.attendees["att"].facilitator_id == "fac"


def test_check_in_keeps_existing_facilitator(store, today):
    store.add_facilitator("fa", first_name="Aldo")
    store.add_facilitator("fb", first_name="Bert")
    store.check_in_now("fa")
    store.check_in_now("fb")
    store.add_attendee("att", facilitator_id="fb")

    result = run(AttendanceService(store, service_date=today).check_in("att"))

    assert result.data.facilitator_id == "fb"
    assert not any(m[0] == "update_attendee_facilitator" for m in store.mutations)


def test_second_check_in_same_day_is_rejected(store, today):
    store.add_attendee("att")
    service = AttendanceService(store, service_date=today)

    assert run(service.check_in("att")).is_success
    again = run(service.check_in("att"))

    assert again.kind == ErrorKind.DUPLICATE_KEY
    assert again.message == ALREADY_CHECKED_IN


def test_concurrent_duplicate_maps_to_already_checked_in(store, today):
    store.add_attendee("att")
    store.check_in_now("att")

    class RacyStore(type(store)):
        async def get_attendance(self, attendee_id, service_date):
            return None  # the other writer has not committed yet

    racy = RacyStore()
    racy.attendees, racy.logs = store.attendees, store.logs

    result = run(AttendanceService(racy, service_date=today).check_in("att"))

    assert result.kind == ErrorKind.DUPLICATE_KEY
    assert result.message == ALREADY_CHECKED_IN


def test_marker_hit_is_confirmed_against_the_store(store, cache, today):
    store.add_attendee("att")
    store.check_in_now("att")
    store.reset_tracking()
    cache.values[checkin_cache_key("att", TODAY)] = "checked_in"

    result = run(AttendanceService(store, cache, today).check_in("att"))

    assert result.message == ALREADY_CHECKED_IN
    assert store.calls == ["get_attendance"]
    assert store.mutations == []


def test_stale_marker_does_not_block_check_in(store, cache, today):
    store.add_attendee("att")
    cache.values[checkin_cache_key("att", TODAY)] = "checked_in"

    result = run(AttendanceService(store, cache, today).check_in("att"))

    assert result.is_success
    assert ("insert_attendance", "att") in store.mutations


class UndeletableCache(FakeCache):
    async def delete(self, key: str) -> None:
        raise OSError("connection reset")


def test_check_in_again_after_marker_delete_fails(store, today):
    store.add_attendee("att")
    service = AttendanceService(store, UndeletableCache(), today)
    run(service.check_in("att"))

    removed = run(service.remove_check_in(next(iter(store.logs))))
    again = run(service.check_in("att"))

    assert removed.is_success
    assert again.is_success
    assert len(store.logs) == 1


def test_check_in_yesterday_does_not_block_today(store, today):
    store.add_attendee("att")
    store.check_in_now("att", YESTERDAY)

    assert run(AttendanceService(store, service_date=today).check_in("att")).is_success


def test_check_in_unknown_attendee(store, today):
    result = run(AttendanceService(store, service_date=today).check_in("ghost"))

    assert result.kind == ErrorKind.NOT_FOUND


def test_check_in_empty_id(store, today):
    result = run(AttendanceService(store, service_date=today).check_in(""))

    assert result.kind == ErrorKind.INVALID_ARGUMENT


def test_check_in_succeeds_when_attendee_reload_fails(store, today):
    store.add_attendee("att")
    store.fail("get_attendee")

    result = run(AttendanceService(store, service_date=today).check_in("att"))

    assert result.is_success
    assert result.partial is True
    assert result.data is None
    assert "could not retrieve" in result.message


def test_assignment_failure_does_not_fail_check_in(store, today):
    store.add_facilitator("fac")
    store.check_in_now("fac")
    store.add_attendee("att")
    store.fail("update_attendee_facilitator", ErrorKind.UNKNOWN, "oops")

    result = run(AttendanceService(store, service_date=today).check_in("att"))

    assert result.is_success
    assert result.data.facilitator_id is None
    assert result.metadata["assignment_error"]["kind"] == "UNKNOWN"


def test_search_requires_two_characters(store):
    store.add_attendee("att", first_name="Ana")

    result = run(AttendanceService(store).search_attendees(" a "))

    assert result.data == []
    assert store.calls == []


def test_search_matches_names_and_numbers(store):
    store.add_attendee("a1", first_name="Ana", last_name="Cruz")
    store.add_attendee("a2", first_name="Bea", last_name="Anatolia")
    store.add_attendee("a3", first_name="Cy", contact_number="+639170000001")

    by_name = run(AttendanceService(store).search_attendees("ana")).data
    by_number = run(AttendanceService(store).search_attendees("9170")).data

    assert [r.id for r in by_name] == ["a1", "a2"]
    assert by_name[0].full_name == "Ana Cruz"
    assert [r.id for r in by_number] == ["a3"]


def test_checked_in_today_lists_newest_first(store, today):
    store.add_attendee("first", is_first_timer=True)
    store.add_attendee("second")
    store.add_attendee("before")
    store.check_in_now("first")
    store.check_in_now("second")
    store.check_in_now("before", YESTERDAY)

    result = run(AttendanceService(store, service_date=today).checked_in_today())

    assert [r.attendee_id for r in result.data] == ["second", "first"]
    assert result.data[1].is_first_timer is True


def test_remove_check_in_clears_marker(store, cache, today):
    store.add_attendee("att")
    service = AttendanceService(store, cache, today)
    run(service.check_in("att"))
    log_id = next(iter(store.logs))

    removed = run(service.remove_check_in(log_id))

    assert removed.is_success
    assert store.logs == {}
    assert checkin_cache_key("att", TODAY) not in cache.values
    assert run(service.check_in("att")).is_success


def test_remove_missing_check_in(store, today):
    service = AttendanceService(store, service_date=today)

    assert run(service.remove_check_in("nope")).kind == ErrorKind.NOT_FOUND
    assert run(service.remove_check_in("")).kind == ErrorKind.INVALID_ARGUMENT
