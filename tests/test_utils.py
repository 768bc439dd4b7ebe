from datetime import datetime, timezone

import pytest

from app.payment_plans import get_plan, get_plans_for_user_type
from app.services.payment_service import subscription_terms
from app.utils.commission import calculate_bulk_commission, calculate_commission, calculate_net_revenue
from app.utils.datetime_ist import IST, add_months, ensure_datetime, format_as_ist, parse_as_ist, to_utc_iso
from app.utils.financial_year import (
    days_remaining_in_financial_year,
    get_financial_year_end,
    get_financial_year_label,
    get_financial_year_start,
    is_in_current_financial_year,
)
from app.utils.helpers import (
    format_file_size,
    get_pagination_meta,
    get_pagination_params,
    sanitize_input,
    validate_email,
    validate_phone,
)
from app.utils.uid import (
    build_certificate_uid,
    build_event_uid,
    build_receipt,
    build_user_uid,
    format_ddmmyy,
    get_location_code,
    get_sport_code,
    get_state_code,
)


# ---- IST handling ----

def test_naive_string_is_read_as_ist():
    parsed = parse_as_ist("2025-11-25T14:30:00")
    assert parsed == datetime(2025, 11, 25, 9, 0, tzinfo=timezone.utc)


def test_explicit_offsets_are_honoured():
    assert parse_as_ist("2025-11-25T14:30:00Z") == datetime(2025, 11, 25, 14, 30, tzinfo=timezone.utc)
    assert parse_as_ist("2025-11-25T14:30:00+01:00") == datetime(2025, 11, 25, 13, 30, tzinfo=timezone.utc)


def test_naive_datetime_is_treated_as_ist():
    assert parse_as_ist(datetime(2025, 1, 1, 5, 30)) == datetime(2025, 1, 1, 0, 0, tzinfo=timezone.utc)


def test_empty_values_parse_to_none():
    assert parse_as_ist(None) is None
    assert parse_as_ist("") is None


def test_garbage_raises_value_error():
    with pytest.raises(ValueError):
        parse_as_ist("next tuesday")


def test_format_round_trips_wall_clock():
    assert format_as_ist(parse_as_ist("2025-11-25T14:30:00")) == "2025-11-25T14:30:00"


def test_ensure_datetime_reads_sqlite_text():
    value = ensure_datetime("2025-11-25 09:00:00")
    assert value == datetime(2025, 11, 25, 9, 0, tzinfo=timezone.utc)


def test_to_utc_iso_has_milliseconds():
    assert to_utc_iso(datetime(2025, 11, 25, 9, 0, 0, 123456, tzinfo=timezone.utc)) == "2025-11-25T09:00:00.123Z"


def test_add_months_clamps_day():
    assert add_months(datetime(2025, 1, 31, tzinfo=timezone.utc), 1).day == 28
    assert add_months(datetime(2025, 12, 15, tzinfo=timezone.utc), 1) == datetime(2026, 1, 15, tzinfo=timezone.utc)


# ---- financial year ----

def test_financial_year_bounds_after_april():
    when = datetime(2025, 6, 10, tzinfo=timezone.utc)
    assert get_financial_year_start(when) == datetime(2025, 4, 1, tzinfo=IST)
    end = get_financial_year_end(when)
    assert (end.year, end.month, end.day, end.hour, end.minute) == (2026, 3, 31, 23, 59)
    assert get_financial_year_label(when) == "2025-26"


def test_financial_year_before_april_belongs_to_previous_year():
    when = datetime(2026, 2, 1, tzinfo=timezone.utc)
    assert get_financial_year_start(when) == datetime(2025, 4, 1, tzinfo=IST)
    assert get_financial_year_label(when) == "2025-26"


def test_april_first_ist_starts_new_year():
    # 31 March 19:00 UTC is already 1 April in India
    when = datetime(2026, 3, 31, 19, 0, tzinfo=timezone.utc)
    assert get_financial_year_label(when) == "2026-27"


def test_membership_in_current_financial_year():
    now = datetime(2025, 10, 1, tzinfo=timezone.utc)
    assert is_in_current_financial_year(datetime(2026, 3, 1, tzinfo=timezone.utc), now)
    assert not is_in_current_financial_year(datetime(2025, 3, 1, tzinfo=timezone.utc), now)


def test_days_remaining_rounds_up():
    now = datetime(2026, 3, 30, 18, 30, tzinfo=timezone.utc)  # 31 March 00:00 IST
    assert days_remaining_in_financial_year(now) == 1


# ---- commission ----

def test_commission_is_two_and_a_half_percent():
    assert calculate_commission(1000) == 25.0
    assert calculate_net_revenue(1000) == 975.0
    assert calculate_commission(299) == 7.48


def test_bulk_commission_totals():
    totals = calculate_bulk_commission([1000, 500, None])
    assert totals == {"total_gross": 1500.0, "total_commission": 37.5, "total_net": 1462.5}


# ---- identifiers ----

def test_user_uid_format():
    assert build_user_uid("STUDENT", 1, "DL", "251125") == "A0001DL251125"
    assert build_user_uid("COACH", 42, "MH", "010125") == "C0042MH010125"


def test_state_code_lookup_and_fallback():
    assert get_state_code("Delhi") == "DL"
    assert get_state_code(None) == "DL"
    assert get_state_code("Atlantis") == "AT"


def test_event_uid_format():
    assert get_sport_code("Football") == "FB"
    assert get_location_code("Mumbai") == "MH"
    assert build_event_uid(3, "FB", "DL", "112025") == "03-FB-EVT-DL-112025"


def test_unknown_sport_uses_letters():
    assert get_sport_code("Kho-Kho") == "KHO"
    assert get_sport_code(None) == "OT"


def test_certificate_uid():
    assert build_certificate_uid("01-FB-EVT-DL-112025", "A0001DL251125") == \
        "STAIRS-CERT-01-FB-EVT-DL-112025-A0001DL251125"


def test_ddmmyy_uses_ist_date():
    assert format_ddmmyy(datetime(2025, 11, 24, 20, 0, tzinfo=timezone.utc)) == "251125"


def test_receipt_fits_razorpay_limit():
    receipt = build_receipt("coach", "5f0c6a4e-1d2b-4c3d-9e8f-0123456789ab")
    assert receipt.startswith("co_6789ab_")
    assert len(receipt) <= 40


# ---- helpers ----

def test_email_and_phone_validation():
    assert validate_email("a@b.co")
    assert not validate_email("not-an-email")
    assert validate_phone("9876543210")
    assert not validate_phone("1234567890")
    assert not validate_phone("98765")


def test_pagination_clamps_values():
    assert get_pagination_params(0, 500) == {"page": 1, "limit": 100, "offset": 0}
    assert get_pagination_params("3", "20") == {"page": 3, "limit": 20, "offset": 40}


def test_pagination_meta():
    meta = get_pagination_meta(25, 2, 10)
    assert meta["total_pages"] == 3
    assert meta["has_next"] and meta["has_prev"]


def test_format_file_size():
    assert format_file_size(0) == "0 Bytes"
    assert format_file_size(1536) == "1.5 KB"
    assert format_file_size(3 * 1024 * 1024 + 512 * 1024) == "3.5 MB"


def test_sanitize_strips_angle_brackets():
    assert sanitize_input("  <b>Cup</b> ") == "bCup/b"
    assert sanitize_input(5) == 5


# ---- plans ----

def test_default_plan_per_user_type():
    assert get_plan("coach")["id"] == "coordinator"
    assert get_plan("student")["price"] == 299
    assert get_plan("student", "no-such-plan") is None


def test_unknown_user_type_falls_back_to_student_catalogue():
    assert get_plans_for_user_type("alien")["redirect_path"] == "/dashboard/student"


def test_coach_subscription_runs_to_financial_year_end():
    now = datetime(2025, 6, 1, tzinfo=timezone.utc)
    kind, expires = subscription_terms("coach", now)
    assert kind == "ANNUAL"
    assert expires == get_financial_year_end(now)


def test_other_subscriptions_are_monthly():
    now = datetime(2025, 6, 1, tzinfo=timezone.utc)
    kind, expires = subscription_terms("student", now)
    assert kind == "MONTHLY"
    assert expires == datetime(2025, 7, 1, tzinfo=timezone.utc)
