"""
Airtable Client
===============
Client for the Airtable REST API (list + PATCH records).

Every call returns a dict. Failures come back as {"error": ...} rather
than raising, so callers decide how to degrade.
"""

import logging
import requests

logger = logging.getLogger(__name__)


class AirtableClient:
    """Client for Airtable API"""

    PAGE_SIZE = 100  # Airtable maximum

    def __init__(self, api_key: str, base_url: str = "https://api.airtable.com/v0",
                 session: requests.Session = None, timeout: int = 30):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

    # =========================================================================
    # HTTP METHODS
    # =========================================================================

    def _request(self, method: str, endpoint: str, params: dict = None, data: dict = None) -> dict:
        """Make an authenticated request to the Airtable API

        Returns:
            dict: {"status": int, "data": parsed JSON or None} or {"error": str}
        """
        if not self.api_key:
            logger.error("Airtable API key not configured")
            return {"error": "Airtable API key not configured"}

        url = f"{self.base_url}/{endpoint}"
        logger.debug(f"Airtable {method}: {endpoint} | params: {params}")

        try:
            response = self.session.request(
                method,
                url,
                headers=self.headers,
                params=params,
                json=data,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Airtable Error: {str(e)}")
            return {"error": str(e)}

        logger.debug(f"Airtable Response: {response.status_code}")

        try:
            body = response.json()
        except ValueError:
            body = None

        return {"status": response.status_code, "data": body}

    def _get(self, endpoint: str, params: dict = None) -> dict:
        """Make a GET request to Airtable API"""
        return self._request("GET", endpoint, params=params)

    def _patch(self, endpoint: str, data: dict = None) -> dict:
        """Make a PATCH request to Airtable API"""
        return self._request("PATCH", endpoint, data=data)

    # =========================================================================
    # RECORDS
    # =========================================================================

    def list_records(self, base_id: str, table_id: str) -> dict:
        """Get every record in a table, following offset pagination

        Returns:
            dict: {"records": [...]} or {"error": str}
        """
        records = []
        offset = None

        while True:
            params = {"pageSize": self.PAGE_SIZE}
            if offset:
                params["offset"] = offset

            result = self._get(f"{base_id}/{table_id}", params)

            if "error" in result:
                return result

            if result["status"] != 200:
                return {"error": f"Response code {result['status']}"}

            data = result.get("data")
            if not isinstance(data, dict):
                return {"error": "Invalid JSON response"}

            if "records" not in data:
                return {"error": "No records found in Airtable response"}

            records.extend(data["records"] or [])

            offset = data.get("offset")
            if not offset:
                break

        return {"records": records}

    def update_record(self, base_id: str, table_id: str, record_id: str, fields: dict) -> dict:
        """Update record fields by ID"""
        return self._patch(f"{base_id}/{table_id}/{record_id}", {
            "fields": fields
        })
