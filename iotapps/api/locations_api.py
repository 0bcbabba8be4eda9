"""
Locations API

Narratives and location user management.
"""

from iotapps.api.client import ApiClient
from iotapps.models import (
    AddLocationUsersApiResponse,
    GetNarrativesApiResponse,
    LocationUsersModel,
)


class LocationsApi:
    def __init__(self, client: ApiClient):
        self._client = client

    async def get_narratives(
        self,
        location_id: int,
        narrative_id: int | None = None,
        priority: int | None = None,
        to_priority: int | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        page_marker: str | None = None,
        row_count: int | None = None,
        search_by: str | None = None,
    ) -> GetNarrativesApiResponse:
        """
        Fetch a page of narratives for a location.

        Args:
            location_id: Location ID
            narrative_id: Return only this narrative
            priority: Minimal priority
            to_priority: Maximal priority
            start_date: Start of the date range, ISO-8601
            end_date: End of the date range, ISO-8601
            page_marker: nextMarker of the previous page
            row_count: Max narratives to return
            search_by: Text to search in title and description
        """
        data = await self._client.get(
            f"/cloud/json/locations/{location_id}/narratives",
            params={
                "narrativeId": narrative_id,
                "priority": priority,
                "toPriority": to_priority,
                "startDate": start_date,
                "endDate": end_date,
                "pageMarker": page_marker,
                "rowCount": row_count,
                "searchBy": search_by,
            },
        )
        return GetNarrativesApiResponse.model_validate(data)

    async def add_location_users(
        self,
        location_id: int,
        users: LocationUsersModel,
    ) -> AddLocationUsersApiResponse:
        data = await self._client.post(
            f"/cloud/json/locations/{location_id}/users",
            json=users.to_payload(),
        )
        return AddLocationUsersApiResponse.model_validate(data)
