"""Wire model parsing and serialization."""

from iotapps.models import (
    ApiResponseBase,
    GetNarrativesApiResponse,
    KeyType,
    LocationAccessLevel,
    LocationUser,
    LocationUserSchedule,
    LocationUsersModel,
    LoginApiResponse,
    NarrativeType,
)


def test_login_response_camel_case():
    response = LoginApiResponse.model_validate({
        "resultCode": 0,
        "key": "abc",
        "keyExpire": "2030-05-01T12:00:00Z",
        "keyExpireMs": 1903867200000,
        "userId": 12,
    })

    assert response.ok
    assert response.key == "abc"
    assert response.user_id == 12
    assert response.expires == "2030-05-01T12:00:00Z"


def test_login_response_expires_falls_back_to_ms():
    response = LoginApiResponse.model_validate({"key": "abc", "keyExpireMs": 1903867200000})

    assert response.expires == 1903867200000
    assert LoginApiResponse().expires is None


def test_unknown_fields_are_kept():
    response = ApiResponseBase.model_validate({"resultCode": 0, "serverVersion": "7.1"})

    assert response.model_extra == {"serverVersion": "7.1"}


def test_error_response():
    response = ApiResponseBase.model_validate({
        "resultCode": 20,
        "resultCodeMessage": "Not logged in",
        "resultCodeDesc": "NOT_LOGGED_IN",
    })

    assert not response.ok
    assert response.result_code_desc == "NOT_LOGGED_IN"


def test_narratives_page():
    response = GetNarrativesApiResponse.model_validate({
        "resultCode": 0,
        "narratives": [
            {"id": 1, "locationId": 5, "narrativeDateMs": 1700000000000, "title": "Motion"},
            {
                "id": 2,
                "narrativeType": 3,
                "locationId": 5,
                "user": {
                    "id": 9,
                    "userName": "carol",
                    "email": {"email": "carol@example.test", "verified": True},
                },
            },
        ],
    })

    assert response.next_marker is None
    first, second = response.narratives
    assert first.narrative_type == NarrativeType.DEFAULT
    assert first.narrative_date_ms == 1700000000000
    assert second.narrative_type == NarrativeType.LOCATION_REMOVED
    assert second.user.email.verified


def test_location_users_payload():
    users = LocationUsersModel(users=[
        LocationUser(
            id=3,
            location_access=LocationAccessLevel.READ,
            category=2,
            nickname="Grandma",
            schedules=[LocationUserSchedule(days_of_week=127, start_time=0, end_time=86400)],
        ),
    ])

    assert users.to_payload() == {
        "users": [{
            "id": 3,
            "locationAccess": 10,
            "temporary": False,
            "category": 2,
            "nickname": "Grandma",
            "schedules": [{"daysOfWeek": 127, "startTime": 0, "endTime": 86400}],
        }],
    }


def test_key_type_values():
    assert [int(k) for k in KeyType] == [0, 1, 11]
