"""Domain Types — verifies rich type definitions and enum values.

Tests:
    - NewType wrappers exist and are callable
    - Enums have expected members and serialize to string
    - ImageContentType maps to storage extensions
"""

from uuid import uuid4

from coachtrack.core.domain_types import (
    ProfileId, ReportId, ImageId,
    Role, Operation, AccessDecision, Metric, ImageContentType,
)


def test_identity_types_wrap_uuid():
    uid = uuid4()
    assert ProfileId(uid) == uid
    assert ReportId(uid) == uid
    assert ImageId(uid) == uid


def test_role_has_three_members():
    assert {r.value for r in Role} == {"admin", "coach", "client"}


def test_enums_serialize_as_strings():
    assert Role.COACH == "coach"
    assert Operation.CREATE_REPORT == "create_report"
    assert AccessDecision.DENY == "deny"


def test_metric_lists_seven_measurements_plus_cardio():
    assert [m.value for m in Metric] == [
        "weight", "waist", "chest",
        "biceps_left", "biceps_right",
        "thigh_left", "thigh_right",
        "cardio_days",
    ]


def test_image_content_type_extensions():
    assert ImageContentType.JPEG.extension == "jpg"
    assert ImageContentType.PNG.extension == "png"
